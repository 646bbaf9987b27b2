"""Test type declaration and the Hierarchy registry."""
from __future__ import annotations

import gc
import logging

import mrotools
import pytest
from mrotools.dispatch import Instance
from mrotools.exceptions import CycleDetected
from mrotools.exceptions import DuplicateParent
from mrotools.exceptions import ProtocolError
from mrotools.exceptions import UnknownType
from mrotools.hierarchy import Hierarchy
from mrotools.hierarchy import TypeNode
from mrotools.identifiers import TypeIdentifier

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))


def test_declare():
    hierarchy = Hierarchy()
    base = hierarchy.declare('Base')
    left = hierarchy.declare('Left', parents=(base,))
    assert isinstance(left, TypeNode)
    assert left.name == 'Left'
    assert left.identifier == TypeIdentifier(('Left',))
    assert left.parents == (TypeIdentifier(('Base',)),)
    assert left.hierarchy is hierarchy
    assert len(hierarchy) == 2
    assert list(hierarchy) == [base, left]
    assert 'Left' in hierarchy
    assert 'Right' not in hierarchy
    assert hierarchy.resolve('Left') is left
    assert hierarchy.resolve(left) is left
    assert hierarchy.get('Right') is None


def test_single_parent_reference():
    hierarchy = Hierarchy()
    hierarchy.declare('Base')
    node = hierarchy.declare('Derived', parents='Base')
    assert node.parents == (TypeIdentifier(('Base',)),)


def test_duplicate_parent():
    hierarchy = Hierarchy()
    left = hierarchy.declare('Left')
    with pytest.raises(DuplicateParent):
        hierarchy.declare('Sub', parents=('Left', 'Left'))
    # Equivalent references are duplicates, too.
    with pytest.raises(DuplicateParent):
        hierarchy.declare('Sub', parents=(left, ('Left',)))
    with pytest.raises(ValueError):
        hierarchy.declare('Sub', parents=('Left', 'Left'))
    # Failed declarations leave nothing behind.
    assert 'Sub' not in hierarchy


def test_self_parent():
    hierarchy = Hierarchy()
    with pytest.raises(CycleDetected):
        hierarchy.declare('Narcissus', parents=('Narcissus',))
    assert 'Narcissus' not in hierarchy


def test_redeclaration():
    hierarchy = Hierarchy()
    hierarchy.declare('Base')
    with pytest.raises(ProtocolError):
        hierarchy.declare('Base')
    # Separate hierarchies are independent.
    assert Hierarchy().declare('Base').name == 'Base'


def test_operations():
    def greet(self, chain):
        return 'hello'

    hierarchy = Hierarchy()
    node = hierarchy.declare('Greeter', operations={'greet': greet})
    assert node.defines('greet')
    assert not node.defines('wave')
    assert node.implementation('greet') is greet
    assert node.implementation('wave') is None
    with pytest.raises(TypeError):
        node.operations['wave'] = greet

    with pytest.raises(TypeError):
        hierarchy.declare('Broken', operations={'greet': 'hello'})
    with pytest.raises(TypeError):
        hierarchy.declare('Broken', operations={'not a name': greet})


def test_immutable():
    hierarchy = Hierarchy()
    node = hierarchy.declare('Base')
    with pytest.raises(AttributeError):
        node._parents = (TypeIdentifier(('Other',)),)
    with pytest.raises(AttributeError):
        node.extra = True


def test_define():
    hierarchy = Hierarchy()

    @hierarchy.define
    class Base:
        def greet(self, chain):
            return 'Base'

        def _helper(self):
            ...

    @hierarchy.define(parents=(Base,))
    class Left:
        def greet(self, chain):
            return 'Left'

    @hierarchy.define('Renamed', parents=('Left',))
    class Original:
        label = 'not an operation'

    assert isinstance(Base, TypeNode)
    assert Base.name == 'Base'
    assert set(Base.operations) == {'greet'}
    assert Left.parents == (TypeIdentifier(('Base',)),)
    assert Original.name == 'Renamed'
    assert dict(Original.operations) == {}
    assert [node.name for node in hierarchy.linearize('Renamed')] == ['Renamed', 'Left', 'Base']

    with pytest.raises(TypeError):
        hierarchy.define(color='blue')


def test_declare_class():
    class A:
        pass

    class B(A):
        pass

    hierarchy = Hierarchy()
    node = hierarchy.declare_class(B)
    assert node.name == TypeIdentifier.copy_from(B).name()
    assert TypeIdentifier.copy_from(A) in [parent for parent in node.parents]
    assert 'builtins.object' in hierarchy
    # Declaring again (or declaring a base) reuses the existing declaration.
    assert hierarchy.declare_class(B) is node
    assert hierarchy.declare_class(A) is hierarchy.resolve(A)
    assert len(hierarchy) == 3

    with pytest.raises(TypeError):
        hierarchy.declare_class(B())


def test_resolve_errors():
    hierarchy = Hierarchy()
    with pytest.raises(UnknownType):
        hierarchy.resolve('Missing')
    with pytest.raises(UnknownType):
        hierarchy.resolve(42)
    with pytest.raises(UnknownType):
        hierarchy.resolve('')


def declared_diamond() -> TypeNode:
    hierarchy = Hierarchy()

    @hierarchy.define
    class Base:
        def greet(self, chain, log):
            log.append('Base')

    @hierarchy.define(parents=(Base,))
    class Left:
        def greet(self, chain, log):
            log.append('Left')
            chain.next(log)

    hierarchy.declare('Right', parents=('Base',))
    hierarchy.declare('Sub', parents=('Left', 'Right'))
    return hierarchy.resolve('Sub')


def test_declared_type_outlives_local_hierarchy():
    sub = declared_diamond()
    gc.collect()
    assert isinstance(sub.hierarchy, Hierarchy)
    assert [t.name for t in mrotools.linearize(sub)] == ['Sub', 'Left', 'Right', 'Base']
    log = []
    Instance(sub).invoke('greet', log)
    assert log == ['Left', 'Base']
