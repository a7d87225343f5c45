"""Interfaces engine - targeted edits of /etc/network/interfaces files.

The engine parses an interfaces file into ordered entries, finds one iface
stanza, and either reports its fields or merges new ones in while leaving
every other line alone:
- Read mode and options of a stanza
- Overwrite or append options without touching the mode
- Unknown lines and hook commands survive a rewrite verbatim

Usage:
    from ifedit.interfaces import InterfacesEngine

    engine = InterfacesEngine()
    view = await engine.read("/etc/network/interfaces", "eth0")
    # {"mode": "static", "address": "10.0.11.100", ...}

    await engine.write("/etc/network/interfaces", "eth3", {
        "address": "99.88.77.100",
        "netmask": "255.255.0.0",
    })
"""

from .schema import (
    AddressMode,
    ChangeType,
    Document,
    Stanza,
    AutoEntry,
    BlankLine,
    TopLevelLine,
    FieldChange,
    FieldView,
    OptionLine,
    RawLine,
    HOOK_KEYS,
)
from .errors import (
    InterfacesError,
    InterfacesIOError,
    InterfaceNotFound,
    InvalidFieldError,
)
from .parser import InterfacesParser, parse
from .serializer import InterfacesSerializer, serialize
from .merge import find_stanza, merge_fields, summarize_changes, validate_fields
from .engine import InterfacesEngine, read, write

__all__ = [
    # Main engine
    "InterfacesEngine",
    "read",
    "write",
    # Schema classes
    "AddressMode",
    "ChangeType",
    "Document",
    "Stanza",
    "AutoEntry",
    "BlankLine",
    "TopLevelLine",
    "FieldChange",
    "FieldView",
    "OptionLine",
    "RawLine",
    "HOOK_KEYS",
    # Errors
    "InterfacesError",
    "InterfacesIOError",
    "InterfaceNotFound",
    "InvalidFieldError",
    # Components (for advanced use)
    "InterfacesParser",
    "parse",
    "InterfacesSerializer",
    "serialize",
    "find_stanza",
    "merge_fields",
    "summarize_changes",
    "validate_fields",
]
