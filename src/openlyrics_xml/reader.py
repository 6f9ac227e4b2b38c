"""Map a parsed OpenLyrics tree onto the :mod:`~openlyrics_xml.models` classes.

The input is the ``song`` node produced by :func:`openlyrics_xml.xmltree.parse`
with :func:`openlyrics_xml.schema.parse_options`, so every always-array path
is already a list and every ``lines`` value is already a clean line-group.
Nothing here mutates the tree.
"""

import copy
import logging
from typing import Any

from .exceptions import ParseError
from .models import Author, Instrument, Meta, Properties, Song, Songbook, Theme, Title, Verse

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = ("properties", "format", "lyrics")

# <properties> children holding a single text value -> Properties field
_SCALAR_PROPERTIES = {
    "copyright": "copyright",
    "ccliNo": "ccli_no",
    "releaseDate": "release_date",
    "transposition": "transposition",
    "key": "key",
    "variant": "variant",
    "publisher": "publisher",
    "version": "version",
    "keywords": "keywords",
    "verseOrder": "verse_order",
}


class SongReader:
    """Build a :class:`~openlyrics_xml.models.Song` from a ``song`` tree node."""

    def read(self, song_node: dict[str, Any]) -> Song:
        """Read every part of the song.

        Raises :class:`~openlyrics_xml.exceptions.ParseError` when one of the
        ``properties``, ``format`` or ``lyrics`` sections is missing.
        """
        missing = [name for name in REQUIRED_SECTIONS if name not in song_node]
        if missing:
            raise ParseError(f"<song> is missing required section(s): {', '.join(missing)}")

        lyrics = song_node["lyrics"] or {}
        song = Song(
            meta=self.read_meta(song_node),
            properties=self.read_properties(song_node["properties"]),
            format=self.read_format(song_node["format"]),
            verses=self.read_verses(_get(lyrics, "verse", [])),
            instruments=self.read_instruments(_get(lyrics, "instrument", [])),
        )
        logger.debug(
            "Read song %r: %d verse(s), %d instrument(s)",
            song.properties.titles[0].text if song.properties.titles else None,
            len(song.verses),
            len(song.instruments),
        )
        return song

    def read_meta(self, song_node: dict[str, Any]) -> Meta:
        # Empty attributes are the builder's placeholders; read them as absent.
        return Meta(
            lang=_get(song_node, "@xml:lang") or None,
            created_in=_get(song_node, "@createdIn") or None,
            modified_in=_get(song_node, "@modifiedIn") or None,
            modified_date=_get(song_node, "@modifiedDate") or None,
            version=_get(song_node, "@version") or None,
            chord_notation=_get(song_node, "@chordNotation") or None,
        )

    def read_properties(self, properties_node: Any) -> Properties:
        node = properties_node or {}
        titles = _get(node, "titles") or {}
        authors = _get(node, "authors") or {}
        comments = _get(node, "comments") or {}
        songbooks = _get(node, "songbooks") or {}
        themes = _get(node, "themes") or {}
        tempo = _get(node, "tempo")

        scalars = {
            field_name: _text(node[tag])
            for tag, field_name in _SCALAR_PROPERTIES.items()
            if _get(node, tag) is not None
        }

        return Properties(
            titles=[_read_title(t) for t in _get(titles, "title", [])],
            authors=[_read_author(a) for a in _get(authors, "author", [])],
            comments=[_text(c) for c in _get(comments, "comment", [])],
            songbooks=[_read_songbook(s) for s in _get(songbooks, "songbook", [])],
            themes=[_read_theme(t) for t in _get(themes, "theme", [])],
            tempo=_text(tempo) if tempo is not None else None,
            tempo_type=_get(tempo, "@type"),
            **scalars,
        )

    def read_format(self, format_node: Any) -> dict[str, Any]:
        if not isinstance(format_node, dict):
            return {}
        return copy.deepcopy(format_node)

    def read_verses(self, verse_nodes: list[Any]) -> list[Verse]:
        return [_read_section(Verse, node) for node in verse_nodes]

    def read_instruments(self, instrument_nodes: list[Any]) -> list[Instrument]:
        return [_read_section(Instrument, node) for node in instrument_nodes]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _get(node: Any, key: str, default: Any = None) -> Any:
    """``dict.get`` that tolerates text-only nodes (plain strings)."""
    if isinstance(node, dict):
        return node.get(key, default)
    return default


def _text(node: Any) -> str:
    if isinstance(node, dict):
        return node.get("#text", "")
    return node


def _flag(value: str | None) -> bool | None:
    if value is None:
        return None
    return value.strip().lower() == "true"


def _read_title(node: Any) -> Title:
    # <title><text>..</text></title> is not valid OpenLyrics but the path
    # is list-normalized, so join it rather than drop it.
    parts = _get(node, "text")
    text = " ".join(_text(p) for p in parts) if parts else _text(node)
    return Title(text=text, original=_flag(_get(node, "@original")), lang=_get(node, "@lang"))


def _read_author(node: Any) -> Author:
    return Author(name=_text(node), type=_get(node, "@type"), lang=_get(node, "@lang"))


def _read_songbook(node: Any) -> Songbook:
    return Songbook(name=_get(node, "@name", ""), entry=_get(node, "@entry"))


def _read_theme(node: Any) -> Theme:
    return Theme(text=_text(node), id=_get(node, "@id"), lang=_get(node, "@lang"))


def _read_section(cls: type[Verse], node: Any) -> Verse:
    return cls(
        name=_get(node, "@name", ""),
        lang=_get(node, "@lang"),
        lines=[_text(group) for group in _get(node, "lines", [])],
    )
