"""
Typed resource definitions.

Each class validates its fields when it's constructed, so a bad value fails the
build where it was written instead of when the template is emitted. Fields that
depend on another resource hold Refs (or Joins of them), never resolved values.
"""
from .errors import InvalidConfiguration
from .policy import PolicyStatement, policy_document
from .refs import Ref, walk_references, s3_arn_for_bucket

__all__ = (
    'Resource', 'StorageBucket', 'AccessRole', 'DeliveryStream', 'ComputeHookRef',
    'ComputeHook', 'COMPRESSION_FORMATS',
)

COMPRESSION_FORMATS = ('UNCOMPRESSED', 'GZIP', 'ZIP', 'Snappy', 'HADOOP_SNAPPY')
VERSIONING_STATUSES = ('Enabled', 'Suspended')


def _positive_int(name, value):
    # bool is an int, but True seconds is never what was meant
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidConfiguration(f"{name} must be a positive integer, not {value!r}")
    return value


def _as_ref(name, value):
    if isinstance(value, Ref):
        if value.attribute is not None:
            raise InvalidConfiguration(
                f"{name} must refer to the resource itself, not its {value.attribute}"
            )
        return value
    if isinstance(value, str) and value:
        return Ref(value)
    raise InvalidConfiguration(f"{name} must be a reference to a resource, not {value!r}")


class Resource:
    """
    Base for everything that can go in a template.
    """
    #: CloudFormation type name
    kind = None
    #: Defined outside this template, only referenced from it
    external = False
    #: Default lifecycle, if the template isn't told otherwise
    retain = False

    def properties(self):
        raise NotImplementedError

    def references(self):
        """
        Every Ref in this resource's fields
        """
        yield from walk_references(self.properties())

    def __repr__(self):
        return f"<{type(self).__name__}>"


class StorageBucket(Resource):
    """
    An S3 bucket.

    Whether the bucket survives teardown has to be decided by the caller.
    """
    kind = 'AWS::S3::Bucket'

    def __init__(self, *, retain, versioning='Enabled'):
        if not isinstance(retain, bool):
            raise InvalidConfiguration(
                f"Buckets need an explicit retain decision (True or False), not {retain!r}"
            )
        if versioning not in VERSIONING_STATUSES:
            raise InvalidConfiguration(
                f"Versioning must be one of {VERSIONING_STATUSES}, not {versioning!r}"
            )
        self.retain = retain
        self.versioning = versioning

    def properties(self):
        return {
            'VersioningConfiguration': {
                'Status': self.versioning,
            },
        }


class AccessRole(Resource):
    """
    An IAM role: who may assume it, and named inline policies saying what it may do.
    """
    kind = 'AWS::IAM::Role'

    def __init__(self, *, assume, policies=None):
        assume = list(assume)
        if not assume:
            raise InvalidConfiguration("Roles need at least one assume role statement")
        for stmt in assume:
            if not isinstance(stmt, PolicyStatement) or stmt.principal is None:
                raise InvalidConfiguration(
                    f"Assume role statements must name a principal: {stmt!r}"
                )
        self.assume = assume
        self.policies = {}
        for name, statements in (policies or {}).items():
            statements = list(statements)
            if not name:
                raise InvalidConfiguration("Inline policies need a name")
            if not statements:
                raise InvalidConfiguration(f"Inline policy {name} has no statements")
            self.policies[name] = statements

    def properties(self):
        props = {
            'AssumeRolePolicyDocument': policy_document(self.assume),
        }
        if self.policies:
            props['Policies'] = [
                {
                    'PolicyName': name,
                    'PolicyDocument': policy_document(statements),
                }
                for name, statements in self.policies.items()
            ]
        return props


class DeliveryStream(Resource):
    """
    A Kinesis Firehose stream delivering into an S3 bucket, optionally passing
    records through a compute hook first.
    """
    kind = 'AWS::KinesisFirehose::DeliveryStream'

    def __init__(self, *, bucket, role, interval, size, compression='UNCOMPRESSED',
                 prefix='', processor=None):
        self.bucket = _as_ref('bucket', bucket)
        self.role = _as_ref('role', role)
        self.interval = _positive_int('Buffering interval (seconds)', interval)
        self.size = _positive_int('Buffering size (MB)', size)
        if compression not in COMPRESSION_FORMATS:
            raise InvalidConfiguration(
                f"Compression must be one of {COMPRESSION_FORMATS}, not {compression!r}"
            )
        self.compression = compression
        if not isinstance(prefix, str):
            raise InvalidConfiguration(f"Prefix must be a string, not {prefix!r}")
        self.prefix = prefix
        if processor is not None and not isinstance(processor, Ref):
            raise InvalidConfiguration(
                f"Processors must be referenced, not given literally: {processor!r}"
            )
        self.processor = processor

    def properties(self):
        dest = {
            'BucketARN': s3_arn_for_bucket(self.bucket),
            'BufferingHints': {
                'IntervalInSeconds': self.interval,
                'SizeInMBs': self.size,
            },
            'CompressionFormat': self.compression,
            'Prefix': self.prefix,
            'RoleARN': Ref(self.role.target, 'Arn'),
        }
        if self.processor is not None:
            dest['ProcessingConfiguration'] = {
                'Enabled': True,
                'Processors': [
                    {
                        'Type': 'Lambda',
                        'Parameters': [
                            {
                                'ParameterName': 'LambdaArn',
                                'ParameterValue': self.processor,
                            },
                        ],
                    },
                ],
            }
        return {
            'ExtendedS3DestinationConfiguration': dest,
        }


class ComputeHookRef(Resource):
    """
    Placeholder for a function defined elsewhere.

    The timeout is carried along for the emitter; nothing here enforces it.
    """
    kind = 'AWS::Lambda::Function'
    external = True

    def __init__(self, *, timeout=None):
        if timeout is not None:
            _positive_int('Timeout (seconds)', timeout)
        self.timeout = timeout

    def properties(self):
        if self.timeout is None:
            return {}
        return {'Timeout': self.timeout}


class ComputeHook:
    """
    Handle for an already defined function, as passed in by the caller.
    """
    def __init__(self, logical_id, timeout=None):
        self.logical_id = logical_id
        self.timeout = timeout

    @property
    def invocation_ref(self):
        """
        The attribute to grant on and to hand to processors
        """
        return Ref(self.logical_id, 'Arn')

    def resource(self):
        return ComputeHookRef(timeout=self.timeout)

    def __repr__(self):
        return f"<ComputeHook {self.logical_id}>"
