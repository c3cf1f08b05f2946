import json

import pytest

from sluice.errors import EmissionError
from sluice.firehose import build_delivery_template
from sluice.graph import Template
from sluice.ids import stable_name
from sluice.refs import Ref, Join, ACCOUNT_ID
from sluice.render import to_cloudformation, to_json, intrinsic
from sluice.resources import StorageBucket

BUCKET = stable_name('FirehoseBucket', 'AWS::S3::Bucket')
ROLE = stable_name('FirehoseRole', 'AWS::IAM::Role')
STREAM = stable_name('FirehoseStream', 'AWS::KinesisFirehose::DeliveryStream')


def test_intrinsics():
    assert intrinsic(Ref('B')) == {'Ref': 'B'}
    assert intrinsic(Ref('F', 'Arn')) == {'Fn::GetAtt': ['F', 'Arn']}
    assert intrinsic(ACCOUNT_ID) == {'Ref': 'AWS::AccountId'}
    assert intrinsic(Join(['arn:aws:s3:::', Ref('B'), '/*'])) == {
        'Fn::Join': ['', ['arn:aws:s3:::', {'Ref': 'B'}, '/*']],
    }


def test_unknown_value():
    with pytest.raises(EmissionError):
        intrinsic(object())


def test_document():
    doc = to_cloudformation(build_delivery_template())
    resources = doc['Resources']
    assert list(resources) == [BUCKET, ROLE, STREAM]
    assert 'Xformer' not in resources
    assert resources[BUCKET]['DeletionPolicy'] == 'Retain'
    assert resources[BUCKET]['Properties'] == {'VersioningConfiguration': {'Status': 'Enabled'}}
    assert 'DependsOn' not in resources[STREAM]

    assume = resources[ROLE]['Properties']['AssumeRolePolicyDocument']['Statement'][0]
    assert assume['Principal'] == {'Service': ['firehose.amazonaws.com']}
    assert assume['Condition'] == {'StringEquals': {'sts:ExternalId': {'Ref': 'AWS::AccountId'}}}

    dest = resources[STREAM]['Properties']['ExtendedS3DestinationConfiguration']
    assert dest['RoleARN'] == {'Fn::GetAtt': [ROLE, 'Arn']}
    assert dest['BucketARN'] == {'Fn::Join': ['', ['arn:aws:s3:::', {'Ref': BUCKET}]]}
    param = dest['ProcessingConfiguration']['Processors'][0]['Parameters'][0]
    assert param['ParameterValue'] == {'Fn::GetAtt': ['Xformer', 'Arn']}


def test_depends_on():
    t = Template('Two buckets')
    t.add_resource('A', StorageBucket(retain=False))
    t.add_resource('B', StorageBucket(retain=False))
    t.add_explicit_dependency('A', 'B')
    doc = to_cloudformation(t.finalize())
    assert doc['Description'] == 'Two buckets'
    assert list(doc['Resources']) == ['B', 'A']
    assert doc['Resources']['A']['DependsOn'] == ['B']
    assert 'DeletionPolicy' not in doc['Resources']['A']


def test_unfinalized():
    t = Template()
    t.add_resource('A', StorageBucket(retain=False))
    with pytest.raises(EmissionError):
        to_cloudformation(t)


def test_json():
    doc = json.loads(to_json(build_delivery_template()))
    assert doc['AWSTemplateFormatVersion'] == '2010-09-09'
