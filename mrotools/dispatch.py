"""Cooperative dispatch along a linearization.

An operation is dispatched by walking the linearization of an instance's
most-derived type with an explicit index cursor. The first type (at or after
the starting index) that defines the operation gets called. It receives a
:py:class:`Chain` and decides for itself whether to continue::

    def greet(self, chain, log):
        log.append('Left')
        chain.next(log)

``chain.next(...)`` is exactly ``dispatcher.invoke(self, 'greet', chain.index + 1, ...)``.
An implementation that does not forward ends the chain. An operation that no
remaining type defines is an empty chain, not an error.

Each type in the linearization appears once, so in a diamond the shared base
runs once, after every type that precedes it.
"""
from __future__ import annotations

__all__ = ['Chain', 'Dispatcher', 'Instance', 'dispatcher', 'type_of']

import functools
import logging
import typing

from mrotools.exceptions import APIError
from mrotools.hierarchy import Hierarchy
from mrotools.hierarchy import TypeNode

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))


@functools.singledispatch
def type_of(obj) -> TypeNode:
    """Get the most-derived declared type of an object.

    Objects participate by carrying a TypeNode in a *dtype* attribute.
    Other representations may be supported by registering overloads.

    Raises:
        APIError if the object does not carry a declared type.
    """
    dtype = getattr(obj, 'dtype', None)
    if not isinstance(dtype, TypeNode):
        raise APIError(f'{obj!r} does not carry a declared type.')
    return dtype


@type_of.register
def _(obj: TypeNode) -> TypeNode:
    return obj


class Chain:
    """Cursor for one step of a cooperative dispatch.

    Attributes:
        dispatcher: the Dispatcher performing the call.
        instance: the object the operation was invoked on.
        operation: name of the dispatched operation.
        index: position of *owner* in the linearization.
        linearization: the linearization being walked.

    """
    __slots__ = ('dispatcher', 'instance', 'operation', 'index', 'linearization')

    def __init__(self, dispatcher: Dispatcher, instance, operation: str, index: int,
                 linearization: typing.Sequence[TypeNode]):
        self.dispatcher = dispatcher
        self.instance = instance
        self.operation = operation
        self.index = index
        self.linearization = linearization

    @property
    def owner(self) -> TypeNode:
        """The type whose implementation is running."""
        return self.linearization[self.index]

    def next(self, *args, **kwargs):
        """Continue the dispatch with the next type after *owner*.

        Returns the result of the next implementation, or None if there is none.
        """
        return self.dispatcher.invoke(self.instance, self.operation, self.index + 1, args, kwargs)

    def has_next(self) -> bool:
        """Check whether a later type in the linearization defines the operation."""
        return any(node.defines(self.operation) for node in self.linearization[self.index + 1:])

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.operation} at {self.index} ({self.owner.name})>'


class Dispatcher:
    """Dispatch named operations along linearizations.

    By default, linearizations come from the Hierarchy in which the instance's
    type was declared. A Dispatcher created with a *hierarchy* resolves every
    type in that Hierarchy instead.
    """

    def __init__(self, hierarchy: Hierarchy = None):
        self.hierarchy = hierarchy

    def linearization(self, subject) -> typing.Tuple[TypeNode, ...]:
        node = type_of(subject)
        hierarchy = self.hierarchy if self.hierarchy is not None else node.hierarchy
        return hierarchy.linearize(node)

    def invoke(self, instance, operation: str, start_index: int = 0,
               args: typing.Sequence = (), kwargs: typing.Mapping = None):
        """Call the first implementation of *operation* at or after *start_index*.

        The implementation is called as ``impl(instance, chain, *args, **kwargs)``.

        Returns:
            The value returned by the implementation, or None if no type from
            *start_index* onward defines the operation.

        Raises:
            APIError if *instance* does not carry a declared type.
            ValueError if *start_index* is negative.
            TypeError if *start_index* is not an integer. Booleans are rejected.
        """
        if isinstance(start_index, bool) or not isinstance(start_index, int):
            raise TypeError(f'start_index must be an integer. Got {start_index!r}.')
        if start_index < 0:
            raise ValueError(f'start_index must not be negative. Got {start_index}.')
        if kwargs is None:
            kwargs = {}

        linearization = self.linearization(instance)
        for index in range(start_index, len(linearization)):
            implementation = linearization[index].implementation(operation)
            if implementation is not None:
                chain = Chain(self, instance, operation, index, linearization)
                logger.debug(f'Dispatching {operation} to {chain.owner.name} (index {index}).')
                return implementation(instance, chain, *args, **kwargs)
        logger.debug(f'No implementation of {operation} for {linearization[0].name} from index {start_index}.')
        return None

    def implementations(self, subject, operation: str) -> typing.List[typing.Tuple[int, TypeNode]]:
        """List the (index, type) pairs that define *operation*, in dispatch order."""
        return [(index, node) for index, node in enumerate(self.linearization(subject))
                if node.defines(operation)]


dispatcher = Dispatcher()
"""Default Dispatcher, resolving types in the Hierarchy that declared them."""


class Instance:
    """Base class for objects dispatched through a declared type.

    Keyword arguments become instance attributes.

    Example::

        obj = Instance(hierarchy.resolve('Sub'), log=[])
        obj.invoke('greet', obj.log)

    """
    dispatcher: typing.ClassVar[Dispatcher] = dispatcher

    def __init__(self, dtype: TypeNode, **state):
        if not isinstance(dtype, TypeNode):
            raise TypeError(f'dtype must be a declared type. Got {dtype!r}.')
        self.dtype = dtype
        for key, value in state.items():
            setattr(self, key, value)

    def invoke(self, operation: str, *args, **kwargs):
        """Dispatch *operation* from the start of the linearization."""
        return self.dispatcher.invoke(self, operation, 0, args, kwargs)

    def __repr__(self):
        return f'<{self.__class__.__name__} of {self.dtype.name}>'
