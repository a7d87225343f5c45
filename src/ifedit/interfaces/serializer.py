"""Serialize a Document back to interfaces file text."""
from .schema import AutoEntry, BlankLine, Document, Stanza, TopLevelLine

DEFAULT_INDENT = "    "


class InterfacesSerializer:
    """Render Documents as interfaces file text."""

    def __init__(self, indent: str = DEFAULT_INDENT, normalize: bool = False):
        """
        Args:
            indent: Leading whitespace for option lines
            normalize: Re-render every stanza, not just modified ones
        """
        self.indent = indent
        self.normalize = normalize

    def serialize(self, document: Document) -> str:
        lines: list[str] = []

        for entry in document.entries:
            if isinstance(entry, Stanza):
                lines.extend(self.render_stanza(entry, document.newline))
            elif isinstance(entry, (AutoEntry, BlankLine, TopLevelLine)):
                lines.append(entry.raw)
            else:
                raise TypeError(f"Unknown document entry: {entry!r}")

        text = "\n".join(lines)
        if lines and document.trailing_newline:
            text += "\n"
        return text

    def render_stanza(self, stanza: Stanza, newline: str = "\n") -> list[str]:
        """
        Render one stanza.

        Untouched stanzas come back exactly as parsed. Modified ones are
        rebuilt as header, option lines, then raw lines, so hooks that were
        interleaved with options end up after them. Lines are joined with
        LF later, so in a CRLF file every rebuilt line carries its own CR.
        """
        if stanza.source_lines and not stanza.modified and not self.normalize:
            return list(stanza.source_lines)

        lines = [stanza.header]
        lines.extend(
            f"{self.indent}{key} {value}"
            for key, value in stanza.options.items()
        )
        lines.extend(stanza.raw_lines)

        cr = newline[:-1]
        return [line if line.endswith(cr) else line + cr for line in lines]


def serialize(document: Document) -> str:
    """Serialize with default settings."""
    return InterfacesSerializer().serialize(document)
