"""
Code to generate AWS IAM policy statements for the resources in a template.

Grants over a bucket always cover both the bucket and its keys, and grants over
another resource go through a reference to it rather than a literal ARN, so a
statement stays correct if that resource gets renamed.
"""
from .errors import InvalidConfiguration
from .refs import (
    Ref, ACCOUNT_ID, walk_references, s3_arn_for_bucket, s3_all_keys_arn_for_bucket,
)

__all__ = (
    'PolicyStatement', 'StatementBuilder', 'allow', 'deny', 'bucket_patterns',
    'external_id_condition', 'assume_role_statement', 'policy_document',
    'POLICY_VERSION', 'FIREHOSE_PRINCIPAL',
)

POLICY_VERSION = '2012-10-17'

FIREHOSE_PRINCIPAL = 'firehose.amazonaws.com'

EFFECTS = ('Allow', 'Deny')


def _dedup(items):
    # Keeps first occurrence; Refs and Joins compare structurally
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen


class PolicyStatement:
    """
    One statement of an IAM policy document.

    Resources are kept in order with duplicates dropped. They may only be left
    empty for statements that name a principal (assume-role statements).
    """
    def __init__(self, effect, actions, resources=(), principal=None, conditions=None):
        if effect not in EFFECTS:
            raise InvalidConfiguration(f"Effect must be one of {EFFECTS}, not {effect!r}")
        if isinstance(actions, str):
            actions = [actions]
        actions = _dedup(actions)
        if not actions:
            raise InvalidConfiguration("Policy statements need at least one action")
        if not all(isinstance(a, str) and a for a in actions):
            raise InvalidConfiguration(f"Actions must be non-empty strings: {actions!r}")
        resources = _dedup(resources)
        if not resources and principal is None:
            raise InvalidConfiguration(
                "Policy statements need resources unless they only name a principal"
            )
        self.effect = effect
        self.actions = tuple(actions)
        self.resources = tuple(resources)
        self.principal = principal
        self.conditions = dict(conditions or {})

    def __eq__(self, other):
        if not isinstance(other, PolicyStatement):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"<PolicyStatement {self.effect} {list(self.actions)}>"

    def references(self):
        yield from walk_references(self.principal)
        yield from walk_references(list(self.resources))
        yield from walk_references(self.conditions)

    def to_dict(self):
        rv = {
            'Effect': self.effect,
            'Action': list(self.actions),
        }
        if self.principal is not None:
            rv['Principal'] = self.principal
        if self.resources:
            rv['Resource'] = list(self.resources)
        if self.conditions:
            rv['Condition'] = self.conditions
        return rv


def bucket_patterns(bucket):
    """
    The two resource patterns for a bucket: the bucket and all its keys.

    bucket may be a Ref or a logical ID.
    """
    if not isinstance(bucket, Ref):
        bucket = Ref(bucket)
    return [s3_arn_for_bucket(bucket), s3_all_keys_arn_for_bucket(bucket)]


class StatementBuilder:
    """
    Fluent construction of a PolicyStatement:

    >>> allow('s3:GetObject').for_bucket(Ref('Bucket')).to_policy_statement()
    """
    def __init__(self, effect, actions):
        self._effect = effect
        self._actions = list(actions)
        self._resources = []
        self._principal = None
        self._conditions = {}

    def for_principals(self, *services):
        self._principal = {'Service': list(services)}
        return self

    def with_condition(self, condition):
        for operator, tests in condition.items():
            self._conditions.setdefault(operator, {}).update(tests)
        return self

    def for_resources(self, *resources):
        self._resources.extend(resources)
        return self

    def for_bucket(self, bucket):
        self._resources.extend(bucket_patterns(bucket))
        return self

    def for_attribute(self, target, attribute):
        """
        Scope to an output attribute of another resource (eg a function's Arn)
        """
        if isinstance(target, Ref):
            target = target.target
        self._resources.append(Ref(target, attribute))
        return self

    def to_policy_statement(self):
        return PolicyStatement(
            self._effect, self._actions,
            resources=self._resources,
            principal=self._principal,
            conditions=self._conditions,
        )


def allow(*actions):
    return StatementBuilder('Allow', actions)


def deny(*actions):
    return StatementBuilder('Deny', actions)


def external_id_condition(expected=ACCOUNT_ID):
    """
    Require sts:ExternalId to equal expected (by default, the deploying account)
    """
    return {'StringEquals': {'sts:ExternalId': expected}}


def assume_role_statement(*principals, conditions=()):
    """
    Let the given service principals assume a role, subject to conditions.
    """
    if not principals:
        raise InvalidConfiguration("Assume role statements need a principal")
    builder = allow('sts:AssumeRole').for_principals(*principals)
    for condition in conditions:
        builder.with_condition(condition)
    return builder.to_policy_statement()


def policy_document(statements):
    return {
        'Version': POLICY_VERSION,
        'Statement': list(statements),
    }
