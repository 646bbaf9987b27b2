"""Test the current Hierarchy stack and the module-level API."""
from __future__ import annotations

import logging

import pytest
import mrotools
from mrotools.context import get_hierarchy
from mrotools.context import scope
from mrotools.exceptions import ProtocolError
from mrotools.hierarchy import Hierarchy

logger = logging.getLogger(__name__)
logger.debug('Importing {}'.format(__name__))


def test_default_hierarchy():
    default = get_hierarchy()
    assert isinstance(default, Hierarchy)
    assert default.label == 'default'
    assert get_hierarchy() is default


def test_scope():
    default = get_hierarchy()
    with scope() as hierarchy:
        assert get_hierarchy() is hierarchy
        assert hierarchy is not default
        base = mrotools.declare('Base')
        mrotools.declare('Left', parents=('Base',))
        mrotools.declare('Right', parents=('Base',))
        mrotools.declare('Sub', parents=('Left', 'Right'))
        assert base.hierarchy is hierarchy
        assert [node.name for node in mrotools.linearize('Sub')] == ['Sub', 'Left', 'Right', 'Base']
    assert get_hierarchy() is default
    assert 'Sub' not in default
    # Declared types still know where they came from.
    assert [node.name for node in mrotools.linearize(base)] == ['Base']


def test_nested_scopes():
    outer = Hierarchy(label='outer')
    with scope(outer):
        with scope() as inner:
            assert get_hierarchy() is inner
        assert get_hierarchy() is outer


def test_scope_protocol():
    context = scope()
    with context:
        with pytest.raises(ProtocolError):
            context.__enter__()
    assert not context.active
    with pytest.warns(UserWarning):
        context.finalize()
    with pytest.raises(TypeError):
        scope('not a hierarchy')


def test_out_of_order_finalize():
    default = get_hierarchy()
    first = scope()
    second = scope()
    first.__enter__()
    second.__enter__()
    with pytest.warns(UserWarning):
        first.finalize()
    assert get_hierarchy() is second.hierarchy
    second.finalize()
    assert get_hierarchy() is default


def test_module_define_and_invoke():
    with scope():
        @mrotools.define
        class Base:
            def greet(self, chain, log):
                log.append('Base')

        @mrotools.define(parents=(Base,))
        class Sub:
            def greet(self, chain, log):
                log.append('Sub')
                chain.next(log)

        log = []
        mrotools.invoke(mrotools.Instance(Sub), 'greet', 0, (log,))
        assert log == ['Sub', 'Base']
