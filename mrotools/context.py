"""Manage the current Hierarchy.

The module-level API of mrotools declares and resolves types in the *current*
Hierarchy. The interpreter keeps a stack of Hierarchies with a process-wide
default at the bottom. A HierarchyScope pushes a Hierarchy for the duration of
a ``with`` block::

    with mrotools.scope() as hierarchy:
        mrotools.declare('Base')
        assert 'Base' in hierarchy

"""

__all__ = ['HierarchyScope', 'get_hierarchy', 'scope']

import logging
import warnings

from mrotools.exceptions import ProtocolError
from mrotools.hierarchy import Hierarchy

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))


class HierarchyScope:
    """Make a Hierarchy current within a ``with`` block."""

    def __init__(self, hierarchy: Hierarchy = None):
        if hierarchy is None:
            hierarchy = Hierarchy()
        if not isinstance(hierarchy, Hierarchy):
            raise TypeError(f'Expected a Hierarchy. Got {hierarchy!r}.')
        self.hierarchy = hierarchy
        self.__active = False

    @property
    def active(self) -> bool:
        return self.__active

    def __enter__(self) -> Hierarchy:
        if self.__active:
            raise ProtocolError('HierarchyScope is already active.')
        _hierarchies.append(self.hierarchy)
        self.__active = True
        logger.debug(f'Entered scope of {self.hierarchy!r}.')
        return self.hierarchy

    def finalize(self):
        if self.__active:
            hierarchy = _hierarchies.pop()
            if hierarchy is not self.hierarchy:
                warnings.warn('Bad finalizer protocol may indicate a leak: '
                              'HierarchyScope is active, but its Hierarchy is not current.')
                _hierarchies.append(hierarchy)
                # Remove the most recent entry for this scope instead.
                for index in range(len(_hierarchies) - 1, 0, -1):
                    if _hierarchies[index] is self.hierarchy:
                        del _hierarchies[index]
                        break
            self.__active = False
            logger.debug(f'Left scope of {self.hierarchy!r}.')
        else:
            warnings.warn('HierarchyScope.finalize has been called more than once.')

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.finalize()
        # Return False to indicate we have not handled any exceptions.
        return False


def scope(hierarchy: Hierarchy = None) -> HierarchyScope:
    """Get a context manager making *hierarchy* (or a new Hierarchy) current."""
    return HierarchyScope(hierarchy)


_hierarchies = [Hierarchy(label='default')]


def get_hierarchy() -> Hierarchy:
    return _hierarchies[-1]
