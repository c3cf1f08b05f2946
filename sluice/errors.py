"""
Everything sluice raises.

All of these are fatal to the template build; nothing here is retried.
"""

__all__ = (
    'SluiceError', 'InvalidConfiguration', 'CollisionError',
    'UnresolvedReferenceError', 'CyclicDependencyError', 'EmissionError',
    'TemplateStateError',
)


class SluiceError(Exception):
    """
    Base for all sluice errors
    """


class InvalidConfiguration(SluiceError, ValueError):
    """
    Raised when a resource is constructed with a bad field value
    """


class CollisionError(SluiceError):
    """
    Raised when two resources would share a logical ID
    """


class UnresolvedReferenceError(SluiceError):
    """
    Raised at finalize time when a reference points at an ID that was never added
    """
    def __init__(self, source, target):
        super().__init__(f"{source} references {target}, which is not in the template")
        self.source = source
        self.target = target


class CyclicDependencyError(SluiceError):
    """
    Raised at finalize time when no emission order exists.

    .cycle is one loop, in dependency order, starting and ending with the same
    ID. .members is every ID that sits on any loop.
    """
    def __init__(self, cycle, members=None):
        self.cycle = list(cycle)
        self.members = set(self.cycle if members is None else members)
        super().__init__(
            "Dependency cycle: " + " -> ".join(self.cycle)
            + f" (involving {', '.join(sorted(self.members))})"
        )


class EmissionError(SluiceError):
    """
    Raised when an emitter fails, or is handed a template it can't emit
    """


class TemplateStateError(SluiceError):
    """
    Raised when a template is modified after it started finalizing
    """
