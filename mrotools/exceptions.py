"""Core mrotools exceptions."""

__all__ = ['MROToolsError', 'HierarchyError', 'InconsistentHierarchy', 'DuplicateParent', 'CycleDetected',
           'UnknownType', 'ProtocolError', 'APIError', 'ConformanceError']


class MROToolsError(Exception):
    """Base exception for mrotools package errors.

    Users should be able to use this base class to catch errors
    emitted by mrotools.
    """


class HierarchyError(MROToolsError):
    """A type declaration or linearization could not be completed."""


class InconsistentHierarchy(HierarchyError, TypeError):
    """The declared parent orderings cannot be merged into one order."""


class DuplicateParent(HierarchyError, ValueError):
    """A type lists the same parent more than once."""


class CycleDetected(HierarchyError, ValueError):
    """A type is (transitively) its own ancestor."""

    def __init__(self, path):
        self.path = tuple(path)
        super().__init__('Inheritance cycle: {}'.format(' -> '.join(str(name) for name in self.path)))


class UnknownType(HierarchyError, LookupError):
    """A type reference could not be resolved."""


class ProtocolError(MROToolsError):
    """A registry or scope was used out of protocol."""


class APIError(MROToolsError):
    """An object does not provide the interface required of it."""


class ConformanceError(APIError):
    """An object does not satisfy a capability."""

    def __init__(self, subject, capability, missing):
        self.subject = subject
        self.capability = capability
        self.missing = tuple(missing)
        super().__init__(
            f'{subject!r} does not satisfy {capability.name}: missing {", ".join(self.missing)}')
