"""
Logical ID allocation.

IDs are derived from a human readable seed and the resource kind, so building
the same template twice gives the same names.
"""
import hashlib
import re

import pulumi

from .errors import CollisionError, InvalidConfiguration

__all__ = 'stable_name', 'IdAllocator',

_NOT_ALNUM = re.compile(r'[^A-Za-z0-9]')


def stable_name(seed, kind):
    """
    The ID for (seed, kind): the seed with anything non-alphanumeric stripped,
    followed by a digest of both.
    """
    if not seed or not isinstance(seed, str):
        raise InvalidConfiguration(f"Seeds must be non-empty strings, not {seed!r}")
    digest = hashlib.sha1(f"{seed}\0{kind}".encode('utf-8')).hexdigest()
    return _NOT_ALNUM.sub('', seed) + digest


class IdAllocator:
    """
    Hands out logical IDs for a single template build.
    """
    def __init__(self):
        self._issued = {}  # id -> (seed, kind)

    def __contains__(self, logical_id):
        return logical_id in self._issued

    def _claim(self, logical_id, seed, kind):
        if logical_id in self._issued:
            prev_seed, prev_kind = self._issued[logical_id]
            if (prev_seed, prev_kind) == (seed, kind):
                raise CollisionError(
                    f"{logical_id} was already allocated for {kind} {seed!r}; use a distinct seed"
                )
            raise CollisionError(
                f"{logical_id} for {kind} {seed!r} collides with {prev_kind} {prev_seed!r}"
            )
        self._issued[logical_id] = (seed, kind)
        pulumi.debug(f"Allocated {logical_id} for {kind}")
        return logical_id

    def allocate(self, seed, kind):
        """
        Derive and claim the ID for (seed, kind).
        """
        return self._claim(stable_name(seed, kind), seed, kind)

    def reserve(self, logical_id, kind):
        """
        Claim an ID chosen by the caller, such as an externally defined function.
        """
        if not logical_id or _NOT_ALNUM.search(logical_id):
            raise InvalidConfiguration(f"Logical IDs must be alphanumeric, not {logical_id!r}")
        return self._claim(logical_id, logical_id, kind)
