"""
Settings for the delivery stream template, read from the stack config.
"""
import pulumi

__all__ = 'Settings',

DEFAULT_DESCRIPTION = "Kinesis Firehose delivery into S3, transformed by a Lambda function"


class Settings:
    """
    Inputs to the delivery stream template. Values are checked when the
    resources are built, not here.
    """
    def __init__(self, *, interval=60, size=50, compression='UNCOMPRESSED',
                 prefix='firehose/', hook='Xformer', hook_timeout=5*60,
                 noop=False, description=DEFAULT_DESCRIPTION,
                 stack_name='TransformerStack'):
        self.interval = interval
        self.size = size
        self.compression = compression
        self.prefix = prefix
        self.hook = hook
        self.hook_timeout = hook_timeout
        self.noop = noop
        self.description = description
        self.stack_name = stack_name

    def __repr__(self):
        return (
            f"<Settings interval={self.interval} size={self.size} "
            f"compression={self.compression} prefix={self.prefix!r} hook={self.hook}>"
        )

    @classmethod
    def from_config(cls, name='sluice'):
        """
        Read settings from pulumi.Config(name), falling back to the defaults.
        """
        config = pulumi.Config(name)
        defaults = cls()

        def _or(value, default):
            return default if value is None else value

        return cls(
            interval=_or(config.get_int('bufferInterval'), defaults.interval),
            size=_or(config.get_int('bufferSize'), defaults.size),
            compression=_or(config.get('compression'), defaults.compression),
            prefix=_or(config.get('prefix'), defaults.prefix),
            hook=_or(config.get('hook'), defaults.hook),
            hook_timeout=_or(config.get_int('hookTimeout'), defaults.hook_timeout),
            noop=_or(config.get_bool('noop'), defaults.noop),
            description=_or(config.get('description'), defaults.description),
            stack_name=_or(config.get('stackName'), defaults.stack_name),
        )

    def scoped_stack_name(self):
        """
        The emitted component's name, qualified by the Pulumi stack so several
        stacks in one account don't collide.
        """
        return f"{self.stack_name}-{pulumi.get_stack()}"
