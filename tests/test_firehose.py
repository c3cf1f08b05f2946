import pytest

from sluice.config import Settings
from sluice.errors import InvalidConfiguration, UnresolvedReferenceError
from sluice.firehose import decorate_delivery_stream, build_delivery_template, DELIVERY_ACTIONS
from sluice.graph import Template, FINALIZED
from sluice.ids import stable_name
from sluice.refs import Ref, Join
from sluice.render import to_cloudformation
from sluice.resources import ComputeHook

BUCKET = stable_name('FirehoseBucket', 'AWS::S3::Bucket')
ROLE = stable_name('FirehoseRole', 'AWS::IAM::Role')
STREAM = stable_name('FirehoseStream', 'AWS::KinesisFirehose::DeliveryStream')


def test_order():
    t = build_delivery_template()
    assert t.state == FINALIZED
    assert t.order.index(BUCKET) < t.order.index(ROLE) < t.order.index(STREAM)
    assert t.order.index('Xformer') < t.order.index(ROLE)


def test_no_explicit_edges_needed():
    t = build_delivery_template()
    assert t.explicit_edges == []
    assert set(t.dependencies_of(ROLE)) == {BUCKET, 'Xformer'}
    assert set(t.dependencies_of(STREAM)) == {BUCKET, ROLE, 'Xformer'}


def test_bucket_is_retained():
    t = build_delivery_template()
    assert t.retained(BUCKET)
    assert not t.retained(ROLE)
    assert not t.retained(STREAM)


def test_role_policy():
    role = build_delivery_template()[ROLE]
    delivery, invoke = role.policies['FirehoseDeliveryPolicy']
    assert delivery.actions == DELIVERY_ACTIONS
    assert list(delivery.resources) == [
        Join(['arn:aws:s3:::', Ref(BUCKET)]),
        Join(['arn:aws:s3:::', Ref(BUCKET), '/*']),
    ]
    assert invoke.actions == ('lambda:InvokeFunction', 'lambda:GetFunctionConfiguration')
    assert invoke.resources == (Ref('Xformer', 'Arn'),)


def test_stream_uses_settings():
    settings = Settings(interval=120, size=5, compression='GZIP', prefix='logs/')
    stream = build_delivery_template(settings)[STREAM]
    assert (stream.interval, stream.size) == (120, 5)
    assert stream.compression == 'GZIP'
    assert stream.prefix == 'logs/'
    assert stream.processor == Ref('Xformer', 'Arn')


@pytest.mark.parametrize('kwargs', [{'interval': 0}, {'size': 0}, {'compression': 'LZ4'}])
def test_bad_settings(kwargs):
    with pytest.raises(InvalidConfiguration):
        build_delivery_template(Settings(**kwargs))


def test_dry_run_builds_same_template():
    real = build_delivery_template(dry_run=False)
    dry = build_delivery_template(dry_run=True)
    assert dry.dry_run and not real.dry_run
    assert dry.order == real.order
    assert to_cloudformation(dry) == to_cloudformation(real)


def test_dry_run_defaults_to_noop_setting():
    assert build_delivery_template(Settings(noop=True)).dry_run


def test_hook_id_flows_into_statement():
    def invoke_resources(hook):
        doc = to_cloudformation(build_delivery_template(Settings(hook=hook)))
        policy = doc['Resources'][ROLE]['Properties']['Policies'][0]['PolicyDocument']
        return policy['Statement'][1]['Resource']

    assert invoke_resources('Xformer') == [{'Fn::GetAtt': ['Xformer', 'Arn']}]
    assert invoke_resources('OtherXformer') == [{'Fn::GetAtt': ['OtherXformer', 'Arn']}]


def test_decorator_needs_hook_in_template():
    t = Template()
    decorate_delivery_stream(t, ComputeHook('Xformer'))
    with pytest.raises(UnresolvedReferenceError) as info:
        t.finalize()
    assert info.value.target == 'Xformer'


def test_decorator_with_hook_added_later():
    t = Template()
    hook = ComputeHook('Xformer', timeout=300)
    assert decorate_delivery_stream(t, hook) is t
    t.add_hook(hook)
    t.finalize()
    assert t.order[0] == BUCKET
    assert t.order.index('Xformer') < t.order.index(ROLE)
