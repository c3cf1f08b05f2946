"""
Adds a Kinesis Firehose stream to a template, delivering into a fresh bucket and
passing every record through an existing function first.

Nothing here orders anything by hand: the role refers to the bucket and the
function, the stream refers to all three, and the template works out the rest.
"""
import pulumi

from .config import Settings
from .graph import Template
from .policy import (
    allow, assume_role_statement, external_id_condition, FIREHOSE_PRINCIPAL,
)
from .refs import Ref
from .resources import ComputeHook

__all__ = 'decorate_delivery_stream', 'build_delivery_template', 'DELIVERY_ACTIONS',

DELIVERY_ACTIONS = (
    's3:AbortMultipartUpload',
    's3:GetBucketLocation',
    's3:GetObject',
    's3:ListBucket',
    's3:ListBucketMultipartUploads',
    's3:PutObject',
)

HOOK_ACTIONS = (
    'lambda:InvokeFunction',
    'lambda:GetFunctionConfiguration',
)


def decorate_delivery_stream(template, hook, settings=None):
    """
    Add the bucket, delivery role, and stream to template.

    hook is the ComputeHook (already in the template, or added later before
    finalizing) that transforms records on their way in.

    Returns the template.
    """
    if settings is None:
        settings = Settings()
    if not isinstance(hook, ComputeHook):
        hook = ComputeHook(hook)

    bucket = template.add_bucket('FirehoseBucket', retain=True, versioning='Enabled')

    role = template.add_role(
        'FirehoseRole',
        assume=[
            assume_role_statement(
                FIREHOSE_PRINCIPAL,
                conditions=[external_id_condition()],
            ),
        ],
        policies={
            'FirehoseDeliveryPolicy': [
                allow(*DELIVERY_ACTIONS).for_bucket(Ref(bucket)).to_policy_statement(),
                allow(*HOOK_ACTIONS).for_attribute(hook.logical_id, 'Arn').to_policy_statement(),
            ],
        },
    )

    stream = template.add_delivery_stream(
        'FirehoseStream',
        bucket=Ref(bucket),
        role=Ref(role),
        interval=settings.interval,
        size=settings.size,
        compression=settings.compression,
        prefix=settings.prefix,
        processor=hook.invocation_ref,
    )
    pulumi.debug(f"Delivery stream {stream} writes to {bucket} as {role}")
    return template


def build_delivery_template(settings=None, *, dry_run=None):
    """
    Build and finalize a whole delivery stream template around settings.hook.

    dry_run defaults to settings.noop. A dry run template is built and validated
    exactly the same; only the emitter treats it differently.
    """
    if settings is None:
        settings = Settings()
    if dry_run is None:
        dry_run = settings.noop
    template = Template(settings.description, dry_run=dry_run)
    hook = ComputeHook(settings.hook, timeout=settings.hook_timeout)
    template.add_hook(hook)
    decorate_delivery_stream(template, hook, settings)
    return template.finalize()
