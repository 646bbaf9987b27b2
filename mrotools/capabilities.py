"""Structural conformance checks.

A Capability names a set of operations (and optionally how many positional
arguments each must accept). Objects are checked explicitly, at the boundary
where they are accepted, rather than by relying on run time reflection later.

Three kinds of subjects can be checked:

* a declared type: an operation is provided if the first type in the
  linearization that defines it accepts the arguments (after the instance and
  the dispatch chain).
* an object carrying a declared type in its *dtype* attribute: checked as its type.
* any other Python object: an operation is provided by a callable attribute
  of the same name that accepts the arguments. For a class, plain methods are
  checked as if called on an instance.

Example::

    Greeter = Capability('Greeter', {'greet': 1})
    greeter = require(obj, Greeter)

"""
from __future__ import annotations

__all__ = ['Capability', 'conforms', 'missing', 'require']

import collections.abc
import functools
import inspect
import logging
import types
import typing

from mrotools.exceptions import ConformanceError
from mrotools.hierarchy import TypeNode

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))

Arity = typing.Optional[int]
"""Number of positional arguments an operation must accept, or None for no constraint."""


class Capability:
    """A named set of operation signatures.

    Arguments:
        name: label for error messages.
        operations: mapping of operation names to arities, or an iterable of
            operation names (no arity constraint).
        extends: other capabilities whose operations are included.

    """

    def __init__(self, name: str, operations: typing.Union[typing.Mapping[str, Arity], typing.Iterable[str]] = (),
                 extends: typing.Iterable[Capability] = ()):
        self.name = str(name)
        if isinstance(operations, str):
            operations = (operations,)
        if not isinstance(operations, collections.abc.Mapping):
            operations = {operation: None for operation in operations}

        combined: typing.Dict[str, Arity] = {}
        for base in extends:
            if not isinstance(base, Capability):
                raise TypeError(f'Capabilities can only extend other capabilities. Got {base!r}.')
            combined.update(base.operations)
        for operation, arity in operations.items():
            if arity is not None and (not isinstance(arity, int) or arity < 0):
                raise ValueError(f'Arity of {operation} must be a non-negative integer or None. Got {arity!r}.')
            combined[str(operation)] = arity
        self.operations: typing.Mapping[str, Arity] = types.MappingProxyType(combined)

    def __contains__(self, operation) -> bool:
        return operation in self.operations

    def __iter__(self):
        return iter(self.operations)

    def __repr__(self):
        return f'{self.__class__.__name__}({self.name!r}, {dict(self.operations)!r})'


def _accepts(function, arity: Arity, leading: int) -> bool:
    if arity is None:
        return True
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        # Some builtins do not expose a signature. Presence has to be enough.
        logger.debug(f'No signature available for {function!r}.')
        return True
    try:
        signature.bind(*([None] * (leading + arity)))
    except TypeError:
        return False
    return True


@functools.singledispatch
def _provides(subject, operation: str, arity: Arity) -> bool:
    dtype = getattr(subject, 'dtype', None)
    if isinstance(dtype, TypeNode):
        return _provides(dtype, operation, arity)
    attribute = getattr(subject, operation, None)
    if attribute is None or not callable(attribute):
        return False
    leading = 0
    if isinstance(subject, type) and inspect.isfunction(attribute) \
            and not isinstance(inspect.getattr_static(subject, operation, None), staticmethod):
        # Looked up on the class, so the instance argument is not bound yet.
        leading = 1
    return _accepts(attribute, arity, leading=leading)


@_provides.register
def _(subject: TypeNode, operation: str, arity: Arity) -> bool:
    for node in subject.hierarchy.linearize(subject):
        implementation = node.implementation(operation)
        if implementation is not None:
            # Implementations take the instance and the dispatch chain first.
            return _accepts(implementation, arity, leading=2)
    return False


def missing(subject, capability: Capability) -> typing.List[str]:
    """List the operations of *capability* that *subject* does not provide."""
    return [operation for operation, arity in capability.operations.items()
            if not _provides(subject, operation, arity)]


def conforms(subject, capability: Capability) -> bool:
    return not missing(subject, capability)


def require(subject, capability: Capability):
    """Check *subject* against *capability* and return it.

    Raises:
        ConformanceError if any operation is missing or has an incompatible signature.
    """
    absent = missing(subject, capability)
    if absent:
        raise ConformanceError(subject, capability, absent)
    return subject
