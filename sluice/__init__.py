"""
Builds deployment templates as graphs: typed resources, symbolic references
between them, and a dependency-consistent order to emit them in.
"""
from .config import Settings
from .errors import (
    SluiceError, InvalidConfiguration, CollisionError, UnresolvedReferenceError,
    CyclicDependencyError, EmissionError, TemplateStateError,
)
from .firehose import decorate_delivery_stream, build_delivery_template
from .graph import Template
from .ids import IdAllocator, stable_name
from .policy import (
    PolicyStatement, allow, deny, assume_role_statement, external_id_condition,
    policy_document, FIREHOSE_PRINCIPAL,
)
from .refs import Ref, Join, Pseudo, reference, s3_arn_for_bucket, s3_all_keys_arn_for_bucket
from .resources import (
    StorageBucket, AccessRole, DeliveryStream, ComputeHookRef, ComputeHook,
)

__all__ = (
    'Settings', 'Template', 'IdAllocator', 'stable_name',
    'SluiceError', 'InvalidConfiguration', 'CollisionError', 'UnresolvedReferenceError',
    'CyclicDependencyError', 'EmissionError', 'TemplateStateError',
    'decorate_delivery_stream', 'build_delivery_template',
    'PolicyStatement', 'allow', 'deny', 'assume_role_statement', 'external_id_condition',
    'policy_document', 'FIREHOSE_PRINCIPAL',
    'Ref', 'Join', 'Pseudo', 'reference', 's3_arn_for_bucket', 's3_all_keys_arn_for_bucket',
    'StorageBucket', 'AccessRole', 'DeliveryStream', 'ComputeHookRef', 'ComputeHook',
)
