"""Compute the method resolution order of declared types.

The linearization of a type is a total order over the type and its ancestors
in which

* the type itself comes first,
* every type precedes all of its own ancestors,
* the declared order of any type's direct parents is preserved, and
* every type appears exactly once.

It is computed by merging the linearizations of the direct parents together
with the direct-parent list itself (the C3 merge). The result is deterministic
for a given declaration order. Hierarchies whose declared orderings contradict
each other have no linearization.

References:
    https://www.python.org/download/releases/2.3/mro/
"""
from __future__ import annotations

__all__ = ['Linearizer', 'merge']

import collections
import logging
import typing

from mrotools.exceptions import CycleDetected
from mrotools.exceptions import InconsistentHierarchy
from mrotools.exceptions import UnknownType

if typing.TYPE_CHECKING:
    from mrotools.hierarchy import Hierarchy
    from mrotools.hierarchy import TypeNode
    from mrotools.identifiers import TypeIdentifier

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))

T = typing.TypeVar('T', bound=typing.Hashable)


def merge(sequences: typing.Iterable[typing.Sequence[T]]) -> typing.List[T]:
    """Merge ordered sequences into one order consistent with all of them.

    Repeatedly take the first head (in the order the sequences were given)
    that does not appear in the tail of any sequence, append it to the
    result, and remove it from every sequence.

    Raises:
        InconsistentHierarchy if no head can be taken before all sequences
        are exhausted.
    """
    # Sequences are reversed so that each head is the last element.
    pending = [list(reversed(sequence)) for sequence in sequences if len(sequence) > 0]
    # Number of times each item occurs behind the head of some sequence.
    tails = collections.Counter(item for candidates in pending for item in candidates[:-1])
    result = []
    while pending:
        for candidates in pending:
            head = candidates[-1]
            if not tails[head]:
                break
        else:
            heads = []
            for candidates in pending:
                if candidates[-1] not in heads:
                    heads.append(candidates[-1])
            raise InconsistentHierarchy(
                'Cannot create a consistent method resolution order for {}'.format(
                    ', '.join(str(head) for head in heads)))
        result.append(head)
        # The selected head is in no tail, so it can only occur at the front.
        for candidates in pending:
            if candidates[-1] == head:
                candidates.pop()
                if candidates:
                    tails[candidates[-1]] -= 1
        pending = [candidates for candidates in pending if candidates]
    return result


class Linearizer:
    """Compute and cache linearizations for the types of a Hierarchy.

    Declared types are immutable, so a successful linearization is computed
    once and reused. Failures are not cached: a type with an undeclared
    parent may be linearized once the parent has been declared.
    """

    def __init__(self, hierarchy: Hierarchy):
        self.hierarchy = hierarchy
        self._cache: typing.Dict[TypeIdentifier, typing.Tuple[TypeNode, ...]] = {}
        self._ancestors: typing.Dict[TypeIdentifier, typing.FrozenSet[TypeNode]] = {}

    def linearize(self, start) -> typing.Tuple[TypeNode, ...]:
        """Get the linearization of *start*.

        Arguments:
            start: a TypeNode or any reference accepted by Hierarchy.resolve()

        Raises:
            UnknownType if *start* or one of its ancestors is not declared.
            CycleDetected if *start* is (transitively) its own ancestor.
            InconsistentHierarchy if the declared parent orders contradict each other.
        """
        start = self.hierarchy.resolve(start)
        cached = self._cache.get(start.identifier)
        if cached is not None:
            return cached

        # Depth-first over the ancestors that are not linearized yet, so that
        # every type is merged after all of its parents. The identifiers on
        # the stack are the path from *start* to the current type.
        stack = [(start, self._parents(start))]
        path = [start.identifier]
        visiting = {start.identifier}
        while stack:
            node, parents = stack[-1]
            for parent in parents:
                identifier = parent.identifier
                if identifier in self._cache:
                    continue
                if identifier in visiting:
                    raise CycleDetected(tuple(path[path.index(identifier):]) + (identifier,))
                stack.append((parent, self._parents(parent)))
                path.append(identifier)
                visiting.add(identifier)
                break
            else:
                stack.pop()
                visiting.discard(path.pop())
                self._merge(node, parents)
        return self._cache[start.identifier]

    def _parents(self, node: TypeNode) -> typing.List[TypeNode]:
        return [self.hierarchy.resolve(parent) for parent in node.parents]

    def _merge(self, node: TypeNode, parents: typing.List[TypeNode]) -> typing.Tuple[TypeNode, ...]:
        sequences = [[node]]
        sequences.extend(list(self._cache[parent.identifier]) for parent in parents)
        sequences.append(parents)
        try:
            result = tuple(merge(sequences))
        except InconsistentHierarchy as e:
            raise InconsistentHierarchy(f'{node.name}: {e}') from e

        self._cache[node.identifier] = result
        logger.debug(f'Linearized {node.name}: {[str(entry) for entry in result]}')
        return result

    def ancestors(self, start) -> typing.FrozenSet[TypeNode]:
        """Get the transitive closure of the parents of *start*."""
        node = self.hierarchy.resolve(start)
        ancestors = self._ancestors.get(node.identifier)
        if ancestors is None:
            ancestors = frozenset(self.linearize(node)[1:])
            self._ancestors[node.identifier] = ancestors
        return ancestors

    def successor(self, start, after) -> typing.Optional[TypeNode]:
        """Get the type following *after* in the linearization of *start*.

        Returns None if *after* is last.

        Raises:
            UnknownType if *after* is not in the linearization of *start*.
        """
        linearization = self.linearize(start)
        node = self.hierarchy.resolve(after)
        try:
            index = linearization.index(node)
        except ValueError as e:
            raise UnknownType(f'{node.name} is not in the linearization of {linearization[0].name}.') from e
        if index + 1 < len(linearization):
            return linearization[index + 1]
        return None

    def is_cached(self, start) -> bool:
        return self.hierarchy.resolve(start).identifier in self._cache
