"""
Resource options, pointing everything at localstack when STAGE=local.
"""
import os

import pulumi
import pulumi_aws

__all__ = 'PROVIDER', 'opts',

PROVIDER = None

if os.environ.get('STAGE') == 'local':
    PROVIDER = pulumi_aws.Provider(
        "localstack",
        skip_credentials_validation=True,
        skip_metadata_api_check=True,
        s3_use_path_style=True,
        access_key="mockAccessKey",
        secret_key="mockSecretKey",
        region='us-east-1',
        endpoints=[pulumi_aws.ProviderEndpointArgs(
            firehose="http://localhost:4573",
            iam="http://localhost:4593",
            lambda_="http://localhost:4574",
            s3="http://localhost:4572",
            sts="http://localhost:4592",
        )],
    )


def opts(**kwargs):
    """
    Defines an __opts__ for resources, including any localstack config.

    localstack config is only applied if this is a top-level resource (does not
    have a parent); children inherit it.

    Usage:
    >>> Resource(..., **opts(...))
    """
    if PROVIDER is not None and 'parent' not in kwargs:
        kwargs.setdefault('provider', PROVIDER)
    return {
        '__opts__': pulumi.ResourceOptions(**kwargs)
    }
