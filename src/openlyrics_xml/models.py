from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Meta:
    """Document-level attributes of the ``<song>`` root element."""

    lang: str | None = None
    created_in: str | None = None
    modified_in: str | None = None
    modified_date: str | None = None  # ISO 8601, kept as written
    version: str | None = None  # read only; documents are always built as 0.9
    chord_notation: str | None = None  # e.g. "english", "german"


@dataclass(frozen=True)
class Title:
    text: str
    original: bool | None = None
    lang: str | None = None


@dataclass(frozen=True)
class Author:
    name: str
    type: str | None = None  # "words", "music", "translation", ...
    lang: str | None = None  # only meaningful for type="translation"


@dataclass(frozen=True)
class Songbook:
    name: str
    entry: str | None = None


@dataclass(frozen=True)
class Theme:
    text: str
    id: str | None = None
    lang: str | None = None


@dataclass(frozen=True)
class Properties:
    """The ``<properties>`` block of a song.

    Sequences keep document order. Scalar properties are ``None`` when the
    document does not carry them.
    """

    titles: list[Title] = field(default_factory=list)
    authors: list[Author] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)
    songbooks: list[Songbook] = field(default_factory=list)
    themes: list[Theme] = field(default_factory=list)
    copyright: str | None = None
    ccli_no: str | None = None
    release_date: str | None = None
    transposition: str | None = None
    tempo: str | None = None
    tempo_type: str | None = None  # "bpm" or "text"
    key: str | None = None
    variant: str | None = None
    publisher: str | None = None
    version: str | None = None
    keywords: str | None = None
    verse_order: str | None = None  # e.g. "v1 c v2 c"


@dataclass(frozen=True)
class Verse:
    """A named block of lyrics.

    Each entry of ``lines`` is one ``<lines>`` element with break markup
    already turned into ``\\n`` and comments removed.
    """

    name: str
    lines: list[str] = field(default_factory=list)
    lang: str | None = None


@dataclass(frozen=True)
class Instrument(Verse):
    """An instrumental section; same shape as :class:`Verse`."""


@dataclass(frozen=True)
class Song:
    """Canonical representation of an OpenLyrics song.

    Produced by :func:`~openlyrics_xml.document.parse_document` and accepted,
    partially filled in, by :func:`~openlyrics_xml.document.build_document`.
    """

    meta: Meta = field(default_factory=Meta)
    properties: Properties = field(default_factory=Properties)
    format: dict[str, Any] = field(default_factory=dict)
    verses: list[Verse] = field(default_factory=list)
    instruments: list[Instrument] = field(default_factory=list)
