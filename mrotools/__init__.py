"""Method resolution order linearization and cooperative dispatch.

Declare named types with ordered parents, compute their linearization
(C3 merge), and dispatch operations along it with an explicit cursor.

The module-level functions operate on the current Hierarchy
(see :py:mod:`mrotools.context`).
"""

__all__ = ['APIError', 'Capability', 'Chain', 'ConformanceError', 'CycleDetected', 'Dispatcher', 'DuplicateParent',
           'Hierarchy', 'HierarchyError', 'HierarchyScope', 'InconsistentHierarchy', 'Instance', 'Linearizer',
           'MROToolsError', 'ProtocolError', 'TypeIdentifier', 'TypeNode', 'UnknownType', 'conforms', 'declare',
           'define', 'get_hierarchy', 'invoke', 'linearize', 'merge', 'missing', 'require', 'scope', 'type_of']

import logging

from mrotools.exceptions import APIError
from mrotools.exceptions import ConformanceError
from mrotools.exceptions import CycleDetected
from mrotools.exceptions import DuplicateParent
from mrotools.exceptions import HierarchyError
from mrotools.exceptions import InconsistentHierarchy
from mrotools.exceptions import MROToolsError
from mrotools.exceptions import ProtocolError
from mrotools.exceptions import UnknownType
from mrotools.identifiers import TypeIdentifier
from mrotools.linearization import Linearizer
from mrotools.linearization import merge
from mrotools.hierarchy import Hierarchy
from mrotools.hierarchy import TypeNode
from mrotools.dispatch import Chain
from mrotools.dispatch import Dispatcher
from mrotools.dispatch import Instance
from mrotools.dispatch import dispatcher as _dispatcher
from mrotools.dispatch import type_of
from mrotools.capabilities import Capability
from mrotools.capabilities import conforms
from mrotools.capabilities import missing
from mrotools.capabilities import require
from mrotools.context import HierarchyScope
from mrotools.context import get_hierarchy
from mrotools.context import scope

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def declare(name, parents=(), operations=None) -> TypeNode:
    """Declare a type in the current Hierarchy. See :py:meth:`Hierarchy.declare`."""
    return get_hierarchy().declare(name, parents=parents, operations=operations)


def define(*args, **kwargs):
    """Declare a type from a class body in the current Hierarchy. See :py:meth:`Hierarchy.define`."""
    return get_hierarchy().define(*args, **kwargs)


def linearize(start):
    """Linearize a type of the current Hierarchy.

    *start* may be a TypeNode, in which case the Hierarchy that declared it is used.
    """
    if isinstance(start, TypeNode):
        return start.hierarchy.linearize(start)
    return get_hierarchy().linearize(start)


def invoke(instance, operation, start_index=0, args=(), kwargs=None):
    """Dispatch *operation* on *instance*. See :py:meth:`Dispatcher.invoke`."""
    return _dispatcher.invoke(instance, operation, start_index, args, kwargs)
