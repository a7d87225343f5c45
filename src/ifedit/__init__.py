"""ifedit - read and edit Debian /etc/network/interfaces stanzas."""
from .interfaces import (
    InterfacesEngine,
    InterfaceNotFound,
    InterfacesError,
    InterfacesIOError,
    InvalidFieldError,
    read,
    write,
)

__version__ = "0.1.0"

__all__ = [
    "InterfacesEngine",
    "InterfaceNotFound",
    "InterfacesError",
    "InterfacesIOError",
    "InvalidFieldError",
    "read",
    "write",
]
