"""
Emit a finalized template as Pulumi resources.

Resources are registered in the template's order, so by the time something is
created everything it refers to already exists and its Refs can be swapped for
real outputs.
"""
import json
import re

import pulumi
import pulumi_aws
from pulumi_aws import s3, iam, kinesis

from putils import component, opts

from .errors import EmissionError
from .graph import FINALIZED
from .refs import Ref, Join, Pseudo, ACCOUNT_ID, resolve
from .resources import StorageBucket, AccessRole, DeliveryStream

__all__ = 'PulumiEmitter', 'EmittedTemplate', 'attribute_name',

# Physical name limits
BUCKET_PREFIX_MAX = 37
ROLE_PREFIX_MAX = 38
STREAM_NAME_MAX = 64

_CAMEL_HUMP = re.compile(r'(?<=[a-z0-9])([A-Z])')


def attribute_name(attribute):
    """
    CloudFormation attribute -> Pulumi output name (eg Arn -> arn)
    """
    return _CAMEL_HUMP.sub(r'_\1', attribute).lower()


def _json(doc):
    return pulumi.Output.from_input(doc).apply(json.dumps)


def bucket_args(name, lid, bucket, resolver):
    return {
        'bucket_prefix': f"{name}-".lower()[:BUCKET_PREFIX_MAX],
        'versioning': {
            'enabled': bucket.versioning == 'Enabled',
        },
    }


def role_documents(role, resolver):
    """
    The assume role document and the named inline policies, with references resolved
    """
    props = resolve(role.properties(), resolver)
    policies = [
        (policy['PolicyName'], policy['PolicyDocument'])
        for policy in props.get('Policies', [])
    ]
    return props['AssumeRolePolicyDocument'], policies


def role_args(name, lid, role, resolver):
    assume, policies = role_documents(role, resolver)
    return {
        'name_prefix': f"{name}-"[:ROLE_PREFIX_MAX],
        'assume_role_policy': _json(assume),
        'inline_policies': [
            {'name': pname, 'policy': _json(doc)}
            for pname, doc in policies
        ],
    }


def stream_args(name, lid, stream, resolver):
    dest = resolve(stream.properties(), resolver)['ExtendedS3DestinationConfiguration']
    config = {
        'bucket_arn': dest['BucketARN'],
        'role_arn': dest['RoleARN'],
        'buffering_interval': dest['BufferingHints']['IntervalInSeconds'],
        'buffering_size': dest['BufferingHints']['SizeInMBs'],
        'compression_format': dest['CompressionFormat'],
        'prefix': dest['Prefix'],
    }
    processing = dest.get('ProcessingConfiguration')
    if processing is not None:
        config['processing_configuration'] = {
            'enabled': processing['Enabled'],
            'processors': [
                {
                    'type': proc['Type'],
                    'parameters': [
                        {
                            'parameter_name': param['ParameterName'],
                            'parameter_value': param['ParameterValue'],
                        }
                        for param in proc['Parameters']
                    ],
                }
                for proc in processing['Processors']
            ],
        }
    return {
        'name': f"{name}-{lid}"[:STREAM_NAME_MAX],
        'destination': 'extended_s3',
        'extended_s3_configuration': config,
    }


# kind -> (pulumi class, args builder)
TRANSLATIONS = {
    StorageBucket: (s3.Bucket, bucket_args),
    AccessRole: (iam.Role, role_args),
    DeliveryStream: (kinesis.FirehoseDeliveryStream, stream_args),
}


class Resolver:
    """
    Turns deferred values into Pulumi outputs, given the resources created so far.
    """
    def __init__(self, created):
        self.created = created
        self._pseudo = {}

    def __call__(self, value):
        if isinstance(value, Ref):
            try:
                res = self.created[value.target]
            except KeyError:
                raise EmissionError(f"{value.target} has not been emitted") from None
            if value.attribute is None:
                return res.id
            return getattr(res, attribute_name(value.attribute))
        elif isinstance(value, Join):
            parts = [resolve(p, self) for p in value.parts]
            if value.delimiter:
                joined = []
                for i, part in enumerate(parts):
                    if i:
                        joined.append(value.delimiter)
                    joined.append(part)
                parts = joined
            return pulumi.Output.concat(*parts)
        elif isinstance(value, Pseudo):
            if value not in self._pseudo:
                self._pseudo[value] = self._lookup(value)
            return self._pseudo[value]
        raise EmissionError(f"Don't know how to resolve {value!r}")

    def _lookup(self, value):
        if value == ACCOUNT_ID:
            return pulumi_aws.get_caller_identity_output().account_id
        raise EmissionError(f"Unknown pseudo parameter {value.name}")


@component('sluice:Template', outputs=['stream_names'])
def EmittedTemplate(self, name, template, hooks, __opts__):
    """
    The resources of a template, under one component.
    """
    created = dict(hooks)
    resolver = Resolver(created)
    explicit = {}
    for from_, to in template.explicit_edges:
        explicit.setdefault(from_, []).append(to)

    for lid, resource in template.ordered_resources():
        if resource.external:
            if lid not in created:
                raise EmissionError(f"No existing resource was given for {lid}")
            continue
        klass, make_args = TRANSLATIONS[type(resource)]
        created[lid] = klass(
            lid,
            **make_args(name, lid, resource, resolver),
            **opts(
                parent=self,
                depends_on=[created[d] for d in explicit.get(lid, [])],
                retain_on_delete=template.retained(lid),
            ),
        )
        pulumi.debug(f"Registered {resource.kind} {lid}")

    return {
        'resources': created,
        'stream_names': [
            created[lid].name
            for lid, resource in template.ordered_resources()
            if isinstance(resource, DeliveryStream)
        ],
    }


class PulumiEmitter:
    """
    Registers finalized templates with the Pulumi engine.

    hooks maps the logical IDs of externally defined functions to the Pulumi
    resources for them (eg from lambda_.Function.get()).
    """
    def __init__(self, hooks=None):
        self.hooks = dict(hooks or {})

    def emit(self, name, template, **kwargs):
        """
        Returns the component, or None for dry runs.
        """
        if template.state != FINALIZED:
            raise EmissionError(f"Only finalized templates can be emitted (this one is {template.state})")
        if template.dry_run:
            pulumi.warn(f"Dry run: {len(template)} resources validated, none registered")
            return None
        try:
            return EmittedTemplate(name, template=template, hooks=self.hooks, **opts(**kwargs))
        except EmissionError:
            raise
        except Exception as exc:
            raise EmissionError(f"Failed to emit {name}") from exc
