"""
Deferred values.

A Ref names another resource (or one of its attributes) without touching it;
emitters resolve them once the whole graph is built.
"""

__all__ = (
    'Ref', 'Join', 'Pseudo', 'reference', 'walk_references', 'resolve',
    's3_arn_for_bucket', 's3_all_keys_arn_for_bucket', 'ACCOUNT_ID',
)


class Ref:
    """
    A symbolic pointer to a resource, or to a named output attribute of it.

    Two Refs are equal if they point at the same thing.
    """
    __slots__ = ('target', 'attribute')

    def __init__(self, target, attribute=None):
        self.target = target
        self.attribute = attribute

    def __eq__(self, other):
        if not isinstance(other, Ref):
            return NotImplemented
        return (self.target, self.attribute) == (other.target, other.attribute)

    def __hash__(self):
        return hash((Ref, self.target, self.attribute))

    def __repr__(self):
        if self.attribute is None:
            return f"Ref({self.target!r})"
        return f"Ref({self.target!r}, {self.attribute!r})"


class Join:
    """
    A string assembled from literals and deferred values.
    """
    __slots__ = ('parts', 'delimiter')

    def __init__(self, parts, delimiter=''):
        self.parts = tuple(parts)
        self.delimiter = delimiter

    def __eq__(self, other):
        if not isinstance(other, Join):
            return NotImplemented
        return (self.parts, self.delimiter) == (other.parts, other.delimiter)

    def __hash__(self):
        return hash((Join, self.parts, self.delimiter))

    def __repr__(self):
        return f"Join({list(self.parts)!r}, {self.delimiter!r})"


class Pseudo:
    """
    A value supplied by the deployment environment, such as the account ID.

    Not a resource, so it never creates an edge.
    """
    __slots__ = ('name',)

    def __init__(self, name):
        self.name = name

    def __eq__(self, other):
        if not isinstance(other, Pseudo):
            return NotImplemented
        return self.name == other.name

    def __hash__(self):
        return hash((Pseudo, self.name))

    def __repr__(self):
        return f"Pseudo({self.name!r})"


ACCOUNT_ID = Pseudo('AWS::AccountId')


def reference(target, attribute=None):
    """
    Refer to target (or its attribute). The target doesn't have to exist yet;
    it's checked when the template is finalized.
    """
    return Ref(target, attribute)


def walk_references(value):
    """
    Yield every Ref inside value, depth first.
    """
    if isinstance(value, Ref):
        yield value
    elif isinstance(value, Join):
        for part in value.parts:
            yield from walk_references(part)
    elif isinstance(value, dict):
        for item in value.values():
            yield from walk_references(item)
    elif isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            yield from walk_references(item)
    elif hasattr(value, 'references'):
        yield from value.references()


def resolve(value, resolver):
    """
    Rebuild value with every deferred piece replaced by resolver(piece).

    Objects that know how to serialize themselves (policy statements) are
    expanded through their to_dict() first.
    """
    if isinstance(value, (Ref, Join, Pseudo)):
        return resolver(value)
    elif isinstance(value, dict):
        return {k: resolve(v, resolver) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [resolve(v, resolver) for v in value]
    elif hasattr(value, 'to_dict'):
        return resolve(value.to_dict(), resolver)
    else:
        return value


def s3_arn_for_bucket(bucket):
    """
    ARN of the bucket itself, from a reference to it
    """
    return Join(['arn:aws:s3:::', bucket])


def s3_all_keys_arn_for_bucket(bucket):
    """
    ARN matching every key in the bucket, from a reference to it
    """
    return Join(['arn:aws:s3:::', bucket, '/*'])
