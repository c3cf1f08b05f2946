import pulumi
from pulumi_aws import lambda_

from sluice import Settings, build_delivery_template
from sluice.emit import PulumiEmitter

config = pulumi.Config('sluice')
settings = Settings.from_config()

# The transform function is deployed separately; we only point at it
xformer = lambda_.get_function_output(function_name=config.require('hookFunction'))

template = build_delivery_template(settings)

pipeline = PulumiEmitter({settings.hook: xformer}).emit(settings.scoped_stack_name(), template)

if pipeline is not None:
    pulumi.export('stream_names', pipeline.stream_names)
