"""
Pulumi helpers shared by the emitter and the program.
"""
from .component import Component, component
from .localstack import opts, PROVIDER

__all__ = 'Component', 'component', 'opts', 'PROVIDER',
