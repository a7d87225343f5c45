"""Schema definitions for the interfaces engine.

Models a parsed /etc/network/interfaces file as an ordered list of entries
and the stanzas inside it.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class AddressMode(str, Enum):
    """Addressing method declared on an iface line."""
    STATIC = "static"
    MANUAL = "manual"
    DHCP = "dhcp"
    LOOPBACK = "loopback"


class ChangeType(str, Enum):
    """Outcome of merging a single field into a stanza."""
    CREATE = "create"
    MODIFY = "modify"
    NO_CHANGE = "no_change"


# Body lines that are commands rather than settings
HOOK_KEYS = frozenset({
    "pre-up",
    "up",
    "post-up",
    "pre-down",
    "down",
    "post-down",
})

# Top-level keywords that declare interfaces to bring up
AUTO_KEYWORDS = frozenset({"auto", "allow-auto", "allow-hotplug"})

DEFAULT_FAMILY = "inet"

FieldView = dict[str, str]


@dataclass
class OptionLine:
    """A `key value` line inside a stanza."""
    key: str
    value: str


@dataclass
class RawLine:
    """A stanza body line kept verbatim (hooks, comments, repeats)."""
    text: str


BodyLine = Union[OptionLine, RawLine]


@dataclass
class AutoEntry:
    """An auto/allow-* declaration listing interface names."""
    keyword: str
    names: list[str]
    raw: str


@dataclass
class BlankLine:
    """Empty or whitespace-only line outside any stanza."""
    raw: str = ""


@dataclass
class TopLevelLine:
    """Any other column-zero line (comments, source, mapping, junk)."""
    raw: str


@dataclass
class Stanza:
    """One iface block and its indented body."""
    name: str
    family: str
    mode: str
    options: dict[str, str] = field(default_factory=dict)
    raw_lines: list[str] = field(default_factory=list)
    header: str = ""
    # Source lines of the block, used to re-emit untouched stanzas verbatim
    source_lines: list[str] = field(default_factory=list)
    modified: bool = False

    def __post_init__(self):
        if not self.header:
            self.header = f"iface {self.name} {self.family} {self.mode}"

    @property
    def address_mode(self) -> Optional[AddressMode]:
        """Known addressing mode, or None for modes this engine doesn't know."""
        try:
            return AddressMode(self.mode)
        except ValueError:
            return None

    def to_view(self) -> FieldView:
        """Flatten into the mode + options view handed to callers."""
        return {"mode": self.mode, **self.options}


Entry = Union[AutoEntry, BlankLine, TopLevelLine, Stanza]


@dataclass
class Document:
    """A parsed interfaces file."""
    entries: list[Entry] = field(default_factory=list)
    trailing_newline: bool = True
    # Line terminator of the file, applied to lines of rebuilt stanzas
    newline: str = "\n"

    @property
    def stanzas(self) -> list[Stanza]:
        return [e for e in self.entries if isinstance(e, Stanza)]

    @property
    def auto_interfaces(self) -> list[str]:
        """Interface names from every auto declaration, in file order."""
        names = []
        for entry in self.entries:
            if isinstance(entry, AutoEntry) and entry.keyword == "auto":
                names.extend(entry.names)
        return names


@dataclass
class FieldChange:
    """A single field merged into a stanza."""
    key: str
    change_type: ChangeType
    old_value: Optional[str] = None
    new_value: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "change_type": self.change_type.value,
            "old_value": self.old_value,
            "new_value": self.new_value,
        }
