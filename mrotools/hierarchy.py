"""Declare named types and their ordered parents.

A Hierarchy is a registry of declared types. Each declared type (TypeNode)
records its name, the ordered sequence of its direct parents, and the
operations it implements in its own namespace. Declarations are immutable.

Parents are recorded by name and resolved against the owning Hierarchy when
the type is linearized, so a type may name a parent that has not been
declared yet. Python class inheritance plays no part in any of this; use
:py:meth:`Hierarchy.declare_class` to mirror an existing Python class graph.

Example::

    hierarchy = Hierarchy()
    hierarchy.declare('Base')
    hierarchy.declare('Left', parents=('Base',))
    hierarchy.declare('Right', parents=('Base',))
    hierarchy.declare('Sub', parents=('Left', 'Right'))
    assert [t.name for t in hierarchy.linearize('Sub')] == ['Sub', 'Left', 'Right', 'Base']

"""
from __future__ import annotations

__all__ = ['Hierarchy', 'TypeNode']

import inspect
import logging
import types
import typing

from mrotools.exceptions import CycleDetected
from mrotools.exceptions import DuplicateParent
from mrotools.exceptions import ProtocolError
from mrotools.exceptions import UnknownType
from mrotools.identifiers import TypeIdentifier
from mrotools.identifiers import TypeRepr
from mrotools.linearization import Linearizer

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))

Operation = typing.Callable[..., typing.Any]


class TypeNode:
    """A declared type.

    Instances are created by :py:meth:`Hierarchy.declare` and should not be
    created directly.

    Attributes:
        identifier: normalized name of the type.
        parents: identifiers of the direct parents, in declaration order.
        operations: read-only mapping of operation names to implementations
            defined by this type (not inherited).

    """
    __slots__ = ('_identifier', '_parents', '_operations', '_hierarchy')

    def __init__(self,
                 identifier: TypeIdentifier,
                 parents: typing.Sequence[TypeIdentifier],
                 operations: typing.Mapping[str, Operation],
                 hierarchy: Hierarchy):
        self._identifier = identifier
        self._parents = tuple(parents)
        self._operations = types.MappingProxyType(dict(operations))
        self._hierarchy = hierarchy

    @property
    def identifier(self) -> TypeIdentifier:
        return self._identifier

    @property
    def name(self) -> str:
        return self._identifier.name()

    @property
    def parents(self) -> typing.Tuple[TypeIdentifier, ...]:
        return self._parents

    @property
    def operations(self) -> typing.Mapping[str, Operation]:
        return self._operations

    @property
    def hierarchy(self) -> Hierarchy:
        """The Hierarchy in which this type was declared.

        A declared type keeps its Hierarchy alive, since its parents are
        resolved there.
        """
        return self._hierarchy

    def defines(self, operation: str) -> bool:
        return operation in self._operations

    def implementation(self, operation: str) -> typing.Optional[Operation]:
        return self._operations.get(operation)

    def __setattr__(self, key, value):
        if hasattr(self, '_hierarchy'):
            raise AttributeError(f'{self.__class__.__name__} is immutable.')
        super().__setattr__(key, value)

    def __str__(self):
        return self.name

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.name}>'


def _as_sequence(parents) -> typing.Sequence:
    # A lone reference is a common mistake for a one-element sequence.
    if isinstance(parents, (str, TypeIdentifier, TypeNode, type)):
        return (parents,)
    return tuple(parents)


class Hierarchy:
    """Registry of declared types.

    The Hierarchy is also the scope of the linearization cache. Linearizations
    are computed on first request and reused for the life of the Hierarchy.
    """

    def __init__(self, label: str = None):
        self.label = label
        self._types: typing.Dict[TypeIdentifier, TypeNode] = {}
        self.linearizer = Linearizer(self)

    def declare(self, name: TypeRepr, parents=(), operations: typing.Mapping[str, Operation] = None) -> TypeNode:
        """Declare a new type.

        Arguments:
            name: name of the new type.
            parents: ordered direct parents of the new type. References are
                resolved when the type is linearized, so they need not be
                declared yet.
            operations: mapping of operation names to implementations.
                Implementations are called as ``impl(instance, chain, *args, **kwargs)``
                by the :py:class:`~mrotools.dispatch.Dispatcher`.

        Raises:
            DuplicateParent if a parent is listed more than once.
            CycleDetected if the type names itself as a parent.
            ProtocolError if *name* is already declared in this Hierarchy.
        """
        identifier = TypeIdentifier.copy_from(name)
        if identifier in self._types:
            raise ProtocolError(f'Type {identifier} appears to be declared already.')

        parent_ids: typing.List[TypeIdentifier] = []
        for parent in _as_sequence(parents):
            parent_id = TypeIdentifier.copy_from(parent)
            if parent_id == identifier:
                raise CycleDetected((identifier, identifier))
            if parent_id in parent_ids:
                raise DuplicateParent(f'{identifier} lists parent {parent_id} more than once.')
            parent_ids.append(parent_id)

        if operations is None:
            operations = {}
        for key, value in operations.items():
            if not isinstance(key, str) or not key.isidentifier():
                raise TypeError(f'Operation names must be identifier strings. Got {key!r}.')
            if not callable(value):
                raise TypeError(f'Implementation of {key} for {identifier} is not callable: {value!r}')

        node = TypeNode(identifier, parent_ids, operations, self)
        self._types[identifier] = node
        logger.debug(f'Declared {identifier} with parents {[str(p) for p in parent_ids]} '
                     f'and operations {sorted(operations)}.')
        return node

    def define(self, *args, **kwargs):
        """Declare a type from a class body.

        The public functions of the decorated class become the operations of
        the new type. The decorator returns the declared TypeNode, not the class.

        May be used as a bare decorator or with a name and/or *parents*::

            @hierarchy.define
            class Base:
                def greet(self, chain, log):
                    log.append('Base')

            @hierarchy.define(parents=(Base,))
            class Left:
                def greet(self, chain, log):
                    log.append('Left')
                    chain.next(log)

        """
        if len(args) > 1:
            raise TypeError('Wrong number of positional arguments. Expected zero or one.')
        for kw in kwargs:
            if kw not in ('name', 'parents'):
                raise TypeError(f'{kw!r} is an invalid keyword argument for define()')

        def wrap(cls: type, name=None, parents=()) -> TypeNode:
            if name is None:
                name = cls.__name__
            operations = {key: value for key, value in vars(cls).items()
                          if not key.startswith('_') and inspect.isfunction(value)}
            return self.declare(name, parents=parents, operations=operations)

        if len(args) == 1 and isinstance(args[0], type):
            # Called as a regular decorator.
            return wrap(args[0], **kwargs)
        if len(args) == 1:
            kwargs['name'] = args[0]

        def decorator(cls: type) -> TypeNode:
            return wrap(cls, **kwargs)

        return decorator

    def declare_class(self, cls: type) -> TypeNode:
        """Declare a Python class and (recursively) its bases.

        Types are named by the fully qualified class name. Bases that are
        already declared are reused. No operations are recorded.
        """
        if not isinstance(cls, type):
            raise TypeError(f'Expected a class. Got {cls!r}.')
        identifier = TypeIdentifier.copy_from(cls)
        existing = self._types.get(identifier)
        if existing is not None:
            return existing
        for base in cls.__bases__:
            self.declare_class(base)
        return self.declare(identifier, parents=cls.__bases__)

    def resolve(self, ref: typing.Union[TypeRepr, TypeNode]) -> TypeNode:
        """Get the declared type for a reference.

        Raises:
            UnknownType if no such type is declared in this Hierarchy.
        """
        try:
            identifier = TypeIdentifier.copy_from(ref)
        except (TypeError, ValueError) as e:
            raise UnknownType(f'Not a type reference: {ref!r}') from e
        try:
            return self._types[identifier]
        except KeyError as e:
            raise UnknownType(f'{identifier} is not declared in {self!r}.') from e

    def get(self, ref, default=None) -> typing.Optional[TypeNode]:
        try:
            return self.resolve(ref)
        except UnknownType:
            return default

    def linearize(self, start) -> typing.Tuple[TypeNode, ...]:
        """Get the linearization of a declared type.

        See :py:meth:`mrotools.linearization.Linearizer.linearize`.
        """
        return self.linearizer.linearize(start)

    def ancestors(self, start) -> typing.FrozenSet[TypeNode]:
        return self.linearizer.ancestors(start)

    def successor(self, start, after) -> typing.Optional[TypeNode]:
        return self.linearizer.successor(start, after)

    def __contains__(self, ref) -> bool:
        return self.get(ref) is not None

    def __iter__(self) -> typing.Iterator[TypeNode]:
        return iter(tuple(self._types.values()))

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self):
        if self.label is None:
            return f'<{self.__class__.__name__} at {hex(id(self))}>'
        return f'<{self.__class__.__name__} {self.label!r}>'
