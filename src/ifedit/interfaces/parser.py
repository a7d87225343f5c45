"""Parser for /etc/network/interfaces text.

Converts raw file content into a Document of ordered entries. The parser
is total: lines it does not understand are kept verbatim instead of
raising.
"""
import logging
from typing import Iterable, Optional

from .schema import (
    AUTO_KEYWORDS,
    HOOK_KEYS,
    AutoEntry,
    BlankLine,
    BodyLine,
    Document,
    OptionLine,
    RawLine,
    Stanza,
    TopLevelLine,
)

logger = logging.getLogger(__name__)


class InterfacesParser:
    """Parse interfaces file text into a Document."""

    def __init__(self, extra_hook_keys: Iterable[str] = ()):
        """
        Args:
            extra_hook_keys: Additional body keywords to keep as raw lines
                (e.g. vendor hook commands), on top of up/down and friends.
        """
        self.hook_keys = HOOK_KEYS | frozenset(extra_hook_keys)

    def parse(self, text: str) -> Document:
        """
        Parse interfaces text.

        Args:
            text: Full file content

        Returns:
            Document with one entry per top-level construct
        """
        document = Document(
            trailing_newline=text.endswith("\n"),
            newline=self._detect_newline(text),
        )
        current: Optional[Stanza] = None
        # Blank lines and column-zero comments seen while a stanza is open.
        # They join the stanza only if more indented body follows.
        pending: list[str] = []

        # Only "\n" ends a line. Form feeds, U+2028 and a CR before the
        # newline stay inside the line text.
        lines = text.split("\n") if text else []
        if document.trailing_newline:
            lines.pop()

        for line in lines:
            if not line.strip() or (current and line.startswith("#")):
                if current:
                    pending.append(line)
                else:
                    document.entries.append(self._interstitial(line))
                continue

            if line[0].isspace():
                if current:
                    for held in pending:
                        current.raw_lines.append(held)
                        current.source_lines.append(held)
                    pending = []
                    self._parse_body_line(current, line)
                else:
                    logger.debug(f"Indented line outside any stanza: {line!r}")
                    document.entries.append(TopLevelLine(raw=line))
                continue

            # Column zero: anything here closes the open stanza
            document.entries.extend(self._interstitial(held) for held in pending)
            pending = []
            current = None

            tokens = line.split()
            keyword = tokens[0]

            if keyword == "iface":
                current = self._parse_header(line, tokens)
                if current:
                    document.entries.append(current)
                else:
                    logger.warning(f"Malformed iface line kept verbatim: {line!r}")
                    document.entries.append(TopLevelLine(raw=line))
            elif keyword in AUTO_KEYWORDS:
                document.entries.append(
                    AutoEntry(keyword=keyword, names=tokens[1:], raw=line)
                )
            else:
                document.entries.append(TopLevelLine(raw=line))

        document.entries.extend(self._interstitial(held) for held in pending)

        logger.debug(
            f"Parsed {len(document.entries)} entries, "
            f"{len(document.stanzas)} stanzas"
        )
        return document

    def _parse_header(self, line: str, tokens: list[str]) -> Optional[Stanza]:
        """Open a stanza from `iface <name> <family> <mode> [...]`."""
        if len(tokens) < 4:
            return None

        return Stanza(
            name=tokens[1],
            family=tokens[2],
            mode=tokens[3],
            header=line,
            source_lines=[line],
        )

    def classify(self, stanza: Stanza, line: str) -> BodyLine:
        """Decide whether an indented line is a stanza option or a raw line."""
        parts = line.split(None, 1)
        key = parts[0]
        value = parts[1].strip() if len(parts) > 1 else ""

        if (
            key in self.hook_keys
            or key.startswith("#")
            or not value
            or key in stanza.options
        ):
            return RawLine(text=line)
        return OptionLine(key=key, value=value)

    def _parse_body_line(self, stanza: Stanza, line: str) -> None:
        stanza.source_lines.append(line)

        body = self.classify(stanza, line)
        if isinstance(body, OptionLine):
            stanza.options[body.key] = body.value
        else:
            stanza.raw_lines.append(body.text)

    @staticmethod
    def _detect_newline(text: str) -> str:
        """CRLF if the first line ends with one, LF otherwise."""
        end = text.find("\n")
        if end > 0 and text[end - 1] == "\r":
            return "\r\n"
        return "\n"

    @staticmethod
    def _interstitial(line: str):
        if line.strip():
            return TopLevelLine(raw=line)
        return BlankLine(raw=line)


def parse(text: str) -> Document:
    """Parse interfaces text with default settings."""
    return InterfacesParser().parse(text)
