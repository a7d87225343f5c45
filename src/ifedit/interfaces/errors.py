"""Errors raised by the interfaces engine."""
from typing import Optional


class InterfacesError(Exception):
    """Base class for interfaces engine errors."""
    pass


class InterfacesIOError(InterfacesError, OSError):
    """The interfaces file could not be read or written."""

    def __init__(self, path: str, operation: str, reason: str):
        self.path = path
        self.operation = operation
        super().__init__(f"Cannot {operation} {path}: {reason}")


class InterfaceNotFound(InterfacesError, LookupError):
    """No iface stanza matches the requested name."""

    def __init__(self, interface: str, path: Optional[str] = None):
        self.interface = interface
        self.path = path
        where = f" in {path}" if path else ""
        super().__init__(f"Interface not found: {interface}{where}")


class InvalidFieldError(InterfacesError, ValueError):
    """A field passed to write() can't be stored as an option line."""
    pass
