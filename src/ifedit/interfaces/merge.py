"""Stanza lookup and field merging.

Computes and applies the per-key changes for a partial field update.
"""
import logging
from typing import Any, Iterable, Mapping, Optional

from .errors import InvalidFieldError
from .schema import (
    DEFAULT_FAMILY,
    HOOK_KEYS,
    ChangeType,
    Document,
    FieldChange,
    Stanza,
)

logger = logging.getLogger(__name__)


def find_stanza(
    document: Document,
    name: str,
    family: Optional[str] = DEFAULT_FAMILY,
) -> Optional[Stanza]:
    """
    Find the stanza declaring an interface.

    Args:
        document: Parsed interfaces file
        name: Interface name (e.g. "eth0")
        family: Address family to match; None matches any family

    Returns:
        The first matching stanza, or None if the interface isn't declared
    """
    for stanza in document.stanzas:
        if stanza.name != name:
            continue
        if family is None or stanza.family == family:
            return stanza
    return None


def validate_fields(
    fields: Mapping[str, Any],
    hook_keys: Iterable[str] = HOOK_KEYS,
) -> dict[str, str]:
    """
    Check that every field can be written as a `key value` option line.

    Returns:
        The fields with values converted to str, in caller order

    Raises:
        InvalidFieldError: On the first field that can't be stored
    """
    hook_keys = frozenset(hook_keys)
    cleaned = {}

    for key, value in fields.items():
        if not isinstance(key, str) or key.split() != [key]:
            raise InvalidFieldError(f"Invalid field name: {key!r}")
        if key.startswith("#"):
            raise InvalidFieldError(f"Field name can't start a comment: {key!r}")
        if key in hook_keys:
            raise InvalidFieldError(
                f"'{key}' is a hook command, not an option field"
            )
        if value is None:
            raise InvalidFieldError(f"Missing value for field '{key}'")

        value = str(value)
        if not value.strip():
            raise InvalidFieldError(f"Empty value for field '{key}'")
        # Any line boundary str.splitlines() knows, not just CR and LF
        if value.splitlines() != [value]:
            raise InvalidFieldError(f"Value for '{key}' spans multiple lines")

        cleaned[key] = value.strip()

    return cleaned


def merge_fields(stanza: Stanza, fields: Mapping[str, str]) -> list[FieldChange]:
    """
    Merge a partial field map into a stanza.

    Existing keys keep their position and get the new value. New keys are
    appended in the order given. The stanza's mode is never changed; a
    "mode" entry in fields is skipped.

    Returns:
        One FieldChange per applied field
    """
    changes = []

    for key, value in fields.items():
        if key == "mode":
            if value != stanza.mode:
                logger.warning(
                    f"Ignoring mode change for {stanza.name} "
                    f"({stanza.mode} -> {value}); mode is not writable"
                )
            continue

        old_value = stanza.options.get(key)
        if old_value is None:
            change_type = ChangeType.CREATE
        elif old_value == value:
            change_type = ChangeType.NO_CHANGE
        else:
            change_type = ChangeType.MODIFY

        stanza.options[key] = value
        changes.append(FieldChange(
            key=key,
            change_type=change_type,
            old_value=old_value,
            new_value=value,
        ))

    if any(c.change_type != ChangeType.NO_CHANGE for c in changes):
        stanza.modified = True

    return changes


def summarize_changes(stanza: Stanza, changes: list[FieldChange]) -> str:
    """
    Create a human-readable summary of a merge.

    Useful for dry-run output and logging.
    """
    effective = [c for c in changes if c.change_type != ChangeType.NO_CHANGE]
    if not effective:
        return f"No changes needed - {stanza.name} already matches"

    lines = [f"Changes to {stanza.name} ({len(effective)} total):"]
    for change in effective:
        if change.change_type == ChangeType.CREATE:
            lines.append(f"  [+] {change.key} {change.new_value}")
        else:
            lines.append(
                f"  [~] {change.key} {change.old_value} -> {change.new_value}"
            )
    return "\n".join(lines)
