"""
Decorator to deal with the ComponentResource boilerplate.
"""

import pulumi

__all__ = 'Component', 'component',


class Component(pulumi.ComponentResource):
    """
    A component whose children are made in set_up().

    set_up() returns a dict; the names listed in __outputs__ are registered as
    the component's outputs, and everything returned is set as an attribute.
    """
    __namespace__ = None
    __outputs__ = ()

    def __init__(self, __name__, *pargs, __opts__=None, **kwargs):
        super().__init__(self.__namespace__, __name__, None, __opts__)
        outs = self.set_up(__name__, *pargs, __opts__=__opts__, **kwargs)
        if outs is None:
            outs = {}
        self.register_outputs({
            name: value
            for name, value in outs.items()
            if name in self.__outputs__
        })
        vars(self).update(outs)

    def set_up(self, *pargs, **kwargs):
        pass


def component(namespace=None, outputs=()):
    """
    Makes the given callable a component, with much less boilerplate.

    If no namespace is given, uses the module and function names

    @component('pkg:MyResource', outputs=['arn'])
    def MyResource(self, name, ..., __opts__):
        ...
        return {...outputs}
    """
    def _(func):
        nonlocal namespace
        if namespace is None:
            namespace = f"{func.__module__.replace('.', ':')}:{func.__name__}"

        klass = type(func.__name__, (Component,), {
            '__doc__': func.__doc__,
            '__module__': func.__module__,
            '__qualname__': func.__qualname__,
            'set_up': func,
            '__namespace__': namespace,
            '__outputs__': tuple(outputs),
        })
        return klass

    return _
