"""Support unique identification of declared types.

A type is named by a sequence of strings, starting with the outer namespace
and ending with the type name. The identity of the name is a UUID (version 5)
in the mrotools namespace, so two identifiers built from equivalent
representations compare equal and hash identically.

A TypeIdentifier may be constructed from several representations, including
period-delimited strings, sequences of strings, Python class objects, and
other TypeIdentifier instances.
"""
from __future__ import annotations

__all__ = ['Identifier', 'TypeIdentifier', 'TypeRepr']

import abc
import logging
import typing
import uuid

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))

NAMESPACE_MROTOOLS: uuid.UUID = uuid.uuid5(uuid.NAMESPACE_DNS, 'mrotools.python')

TypeRepr = typing.Union['TypeIdentifier', typing.Sequence[str], type, str]
"""Accepted representations of a type name."""

IdentifierT = typing.TypeVar('IdentifierT', bound='Identifier')


class Identifier(abc.ABC):
    """mrotools object identifiers support this interface.

    The core interface provided by Identifiers is a consistent bytes
    representation of their identity. Equality and hashing are defined
    in terms of those bytes.
    """

    @abc.abstractmethod
    def bytes(self) -> bytes:
        """Get the immutable byte representation of the identity."""
        raise NotImplementedError

    @abc.abstractmethod
    def __str__(self) -> str:
        raise NotImplementedError

    @classmethod
    @abc.abstractmethod
    def copy_from(cls: typing.Type[IdentifierT], obj) -> IdentifierT:
        """Produce a new instance of the Identifier from another object.

        Note that copies of Identifiers must compare equal.
        """
        raise NotImplementedError

    def __eq__(self, other):
        return isinstance(other, self.__class__) and other.bytes() == self.bytes()

    def __hash__(self) -> int:
        return hash(self.bytes())

    def __bytes__(self) -> bytes:
        return bytes(self.bytes())


class TypeIdentifier(Identifier):
    """A type name with strong identity semantics, represented with a UUID."""

    def __init__(self, nested_name: typing.Sequence[str]):
        try:
            if isinstance(nested_name, (str, bytes)):
                raise TypeError('Wrong kind of iterable.')
            self._name_tuple = tuple(str(part) for part in nested_name)
        except TypeError as e:
            raise TypeError(f'Could not construct {self.__class__.__name__} from {repr(nested_name)}') from e
        if len(self._name_tuple) == 0 or any(part == '' for part in self._name_tuple):
            raise ValueError(f'Empty name component in {repr(nested_name)}')
        if any('.' in part for part in self._name_tuple):
            raise ValueError(f'Name components may not contain ".": {repr(nested_name)}')
        self._data = uuid.uuid5(NAMESPACE_MROTOOLS, '.'.join(self._name_tuple))

    def bytes(self) -> bytes:
        return self._data.bytes

    def name(self) -> str:
        return '.'.join(self._name_tuple)

    def scoped_name(self) -> typing.Tuple[str, ...]:
        return self._name_tuple

    def __str__(self) -> str:
        return self.name()

    def __repr__(self):
        return f'{self.__class__.__name__}({self._name_tuple!r})'

    @classmethod
    def copy_from(cls, typeid: TypeRepr) -> 'TypeIdentifier':
        """Create a new TypeIdentifier instance describing the same type as the source.

        Objects that carry an *identifier* attribute (such as declared types)
        are normalized through that attribute.

        Raises:
            TypeError if *typeid* has no recognized representation.
        """
        if isinstance(typeid, TypeIdentifier):
            return cls(typeid._name_tuple)
        if isinstance(typeid, (list, tuple)):
            return cls(typeid)
        if isinstance(typeid, type):
            if typeid.__module__ is not None:
                fully_qualified_name = '.'.join((typeid.__module__, typeid.__qualname__))
            else:
                fully_qualified_name = str(typeid.__qualname__)
            return cls.copy_from(fully_qualified_name)
        if isinstance(typeid, str):
            return cls(tuple(typeid.split('.')))
        identifier = getattr(typeid, 'identifier', None)
        if isinstance(identifier, TypeIdentifier):
            return cls(identifier._name_tuple)
        raise TypeError(f'No TypeIdentifier representation for {typeid!r}.')
