"""Interfaces engine - read and write iface stanzas in a file.

Every call runs its own load, parse, (merge, serialize, save) cycle. Nothing
is cached between calls, so two concurrent writes to the same path race and
the last one wins.
"""
import asyncio
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from ..config.settings import EngineSettings
from ..utils.audit_log import log_change
from ..utils.logging_config import timed
from .errors import InterfaceNotFound, InterfacesError, InterfacesIOError
from .merge import find_stanza, merge_fields, summarize_changes, validate_fields
from .parser import InterfacesParser
from .schema import HOOK_KEYS, Document, FieldChange, FieldView, Stanza
from .serializer import InterfacesSerializer

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class InterfacesEngine:
    """
    Read and edit interface stanzas in an interfaces file.

    Usage:
        engine = InterfacesEngine()
        view = await engine.read("/etc/network/interfaces", "eth0")
        view = await engine.write(
            "/etc/network/interfaces", "eth0", {"address": "10.0.0.5"}
        )
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()
        self.parser = InterfacesParser(self.settings.extra_hook_keys)
        self.serializer = InterfacesSerializer(indent=self.settings.indent)
        self.hook_keys = HOOK_KEYS | frozenset(self.settings.extra_hook_keys)

    @timed("read")
    async def read(
        self,
        path: PathLike,
        name: str,
        family: Optional[str] = None,
    ) -> FieldView:
        """
        Read the mode and options of an interface.

        Args:
            path: Interfaces file
            name: Interface name (e.g. "eth0")
            family: Address family; defaults to the configured family

        Returns:
            {"mode": ..., **options}. Unset options are absent.

        Raises:
            InterfacesIOError: File can't be read
            InterfaceNotFound: No stanza for this interface
        """
        document = await self.load(path)
        stanza = self._require(document, path, name, family)
        return stanza.to_view()

    @timed("write")
    async def write(
        self,
        path: PathLike,
        name: str,
        fields: Mapping[str, Any],
        family: Optional[str] = None,
    ) -> FieldView:
        """
        Merge fields into an interface stanza and save the file.

        Existing options are overwritten in place, new ones are appended in
        the order given. The stanza's mode is never changed, and no other
        stanza or line in the file is touched. Failed writes are audited too,
        with whatever state was known at the point of failure.

        Args:
            path: Interfaces file
            name: Interface name
            fields: Option name -> new value; absent options are left alone
            family: Address family; defaults to the configured family

        Returns:
            Field view of the updated stanza

        Raises:
            InvalidFieldError: A field can't be written as an option line
            InterfacesIOError: File can't be read or written
            InterfaceNotFound: No stanza for this interface
        """
        before: Optional[FieldView] = None
        changes: list[FieldChange] = []
        parameters = {str(k): str(v) for k, v in fields.items()}

        try:
            cleaned = validate_fields(fields, self.hook_keys)
            parameters = cleaned

            document = await self.load(path)
            stanza = self._require(document, path, name, family)
            before = stanza.to_view()

            changes = merge_fields(stanza, cleaned)
            logger.info(
                f"Writing {len(changes)} field(s) to {name} in {path}"
            )
            await self.save(path, document)
        except InterfacesError as e:
            self._audit(path, name, "write", parameters, changes, before, None, error=str(e))
            raise

        after = stanza.to_view()
        self._audit(path, name, "write", cleaned, changes, before, after)
        return after

    async def preview(
        self,
        path: PathLike,
        name: str,
        fields: Mapping[str, Any],
        family: Optional[str] = None,
    ) -> str:
        """
        Preview a write without saving.

        Returns:
            Human-readable summary of the changes write() would make
        """
        cleaned = validate_fields(fields, self.hook_keys)

        document = await self.load(path)
        stanza = self._require(document, path, name, family)
        before = stanza.to_view()

        changes = merge_fields(stanza, cleaned)
        self._audit(
            path, name, "preview", cleaned, changes, before, stanza.to_view(),
            dry_run=True,
        )
        return summarize_changes(stanza, changes)

    async def load(self, path: PathLike) -> Document:
        """Read and parse an interfaces file."""
        loop = asyncio.get_running_loop()
        text = await loop.run_in_executor(None, self._read_text, Path(path))
        return self.parser.parse(text)

    async def save(self, path: PathLike, document: Document) -> None:
        """Serialize a document and write it over the file."""
        text = self.serializer.serialize(document)
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write_text, Path(path), text)

    def _read_text(self, path: Path) -> str:
        try:
            # newline="" keeps CRLF intact for the parser
            with path.open(encoding=self.settings.encoding, newline="") as f:
                return f.read()
        except OSError as e:
            raise InterfacesIOError(str(path), "read", e.strerror or str(e)) from e
        except UnicodeDecodeError as e:
            raise InterfacesIOError(str(path), "decode", str(e)) from e

    def _write_text(self, path: Path, text: str) -> None:
        try:
            with path.open("w", encoding=self.settings.encoding, newline="") as f:
                f.write(text)
        except OSError as e:
            raise InterfacesIOError(str(path), "write", e.strerror or str(e)) from e
        logger.debug(f"Wrote {len(text)} bytes to {path}")

    def _require(
        self,
        document: Document,
        path: PathLike,
        name: str,
        family: Optional[str],
    ) -> Stanza:
        stanza = find_stanza(document, name, family or self.settings.default_family)
        if stanza is None:
            raise InterfaceNotFound(name, str(path))
        return stanza

    def _audit(
        self,
        path: PathLike,
        name: str,
        operation: str,
        parameters: dict,
        changes: list[FieldChange],
        before: Optional[FieldView],
        after: Optional[FieldView],
        error: Optional[str] = None,
        dry_run: bool = False,
    ) -> None:
        log_change(
            path=str(path),
            interface=name,
            operation=operation,
            parameters={
                "fields": parameters,
                "changes": [c.to_dict() for c in changes],
            },
            success=error is None,
            dry_run=dry_run,
            before_state=before,
            after_state=after,
            error=error,
        )


async def read(path: PathLike, name: str) -> FieldView:
    """Read an interface with default settings."""
    return await InterfacesEngine().read(path, name)


async def write(path: PathLike, name: str, fields: Mapping[str, Any]) -> FieldView:
    """Write fields to an interface with default settings."""
    return await InterfacesEngine().write(path, name, fields)
