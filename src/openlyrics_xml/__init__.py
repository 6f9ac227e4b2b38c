from .document import build_document, parse_document
from .exceptions import BuildError, OpenLyricsError, ParseError
from .models import Author, Instrument, Meta, Properties, Song, Songbook, Theme, Title, Verse

__all__ = [
    "Author",
    "BuildError",
    "Instrument",
    "Meta",
    "OpenLyricsError",
    "ParseError",
    "Properties",
    "Song",
    "Songbook",
    "Theme",
    "Title",
    "Verse",
    "build_document",
    "parse_document",
]
