class OpenLyricsError(Exception):
    """Base exception for openlyrics_xml."""


class ParseError(OpenLyricsError):
    """Raised when a document is not well-formed or lacks a required section."""

    def __init__(self, reason: str, line: int | None = None):
        self.reason = reason
        self.line = line
        where = f" (line {line})" if line is not None else ""
        super().__init__(f"Parse error{where}: {reason}")


class BuildError(OpenLyricsError):
    """Raised when a song cannot be turned into an OpenLyrics document."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Build error: {reason}")
