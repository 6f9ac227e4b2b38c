"""Fill the canonical OpenLyrics tree with song data.

:class:`DefaultsMerger` starts from :func:`skeleton` and folds the song into it
one part at a time. Each ``overwrite_*`` step returns a new tree and leaves
its input untouched, so the steps can run in any order.

Default policy
--------------

+------------------------------+---------------------------------------------+
| Field                        | When not supplied                           |
+==============================+=============================================+
| ``xml:lang``, ``createdIn``, | attribute kept, value ``""``                |
| ``modifiedIn``,              |                                             |
| ``modifiedDate``             |                                             |
+------------------------------+---------------------------------------------+
| ``chordNotation``            | attribute omitted                           |
+------------------------------+---------------------------------------------+
| ``titles``                   | required: :class:`BuildError`               |
+------------------------------+---------------------------------------------+
| ``authors``, ``comments``,   | element omitted                             |
| ``songbooks``, ``themes``,   |                                             |
| scalar properties            |                                             |
+------------------------------+---------------------------------------------+
| ``format``                   | empty ``<format></format>``                 |
+------------------------------+---------------------------------------------+
| ``verse``                    | empty ``<lyrics></lyrics>``                 |
+------------------------------+---------------------------------------------+
| ``instrument``               | element omitted                             |
+------------------------------+---------------------------------------------+
"""

import logging
from functools import reduce
from typing import Any, Callable
from xml.sax.saxutils import escape

from lxml import etree

from .exceptions import BuildError
from .models import Author, Instrument, Meta, Properties, Song, Songbook, Theme, Title, Verse

logger = logging.getLogger(__name__)

OPENLYRICS_NAMESPACE = "http://openlyrics.info/namespace/2009/song"
OPENLYRICS_VERSION = "0.9"
STYLESHEET_HREF = "../stylesheets/openlyrics.css"

Tree = dict[str, Any]

# Properties field -> element name, in OpenLyrics document order.
_SCALARS_BEFORE_TEMPO = (
    ("copyright", "copyright"),
    ("ccli_no", "ccliNo"),
    ("release_date", "releaseDate"),
    ("transposition", "transposition"),
)
_SCALARS_AFTER_TEMPO = (
    ("key", "key"),
    ("variant", "variant"),
    ("publisher", "publisher"),
    ("version", "version"),
    ("keywords", "keywords"),
    ("verse_order", "verseOrder"),
)


def skeleton() -> Tree:
    """Return a fresh, mostly empty OpenLyrics tree.

    Empty-string attributes are placeholders that
    :meth:`DefaultsMerger.overwrite_meta` fills in.
    """
    return {
        "?xml": {"@version": "1.0", "@encoding": "UTF-8"},
        "?xml-stylesheet": {"@href": STYLESHEET_HREF, "@type": "text/css"},
        "song": {
            "@xmlns": OPENLYRICS_NAMESPACE,
            "@xml:lang": "",
            "@version": OPENLYRICS_VERSION,
            "@createdIn": "",
            "@modifiedIn": "",
            "@modifiedDate": "",
            "properties": {
                "titles": {"title": []},
            },
            "format": {},
            "lyrics": {
                "verse": [],
            },
        },
    }


class DefaultsMerger:
    """Overwrite the skeleton's placeholders with caller-supplied song data."""

    def merge(self, song: Song) -> Tree:
        steps: list[tuple[Callable[[Tree, Any], Tree], Any]] = [
            (self.overwrite_meta, song.meta),
            (self.overwrite_properties, song.properties),
            (self.overwrite_formats, song.format),
            (self.overwrite_verses, song.verses),
            (self.overwrite_instruments, song.instruments),
        ]
        return reduce(lambda tree, step: step[0](tree, step[1]), steps, skeleton())

    def overwrite_meta(self, tree: Tree, meta: Meta | None) -> Tree:
        meta = meta or Meta()
        song = dict(tree["song"])
        for attribute, value in (
            ("@xml:lang", meta.lang),
            ("@createdIn", meta.created_in),
            ("@modifiedIn", meta.modified_in),
            ("@modifiedDate", meta.modified_date),
            ("@chordNotation", meta.chord_notation),
        ):
            if value:
                song[attribute] = value
        return {**tree, "song": song}

    def overwrite_properties(self, tree: Tree, properties: Properties | None) -> Tree:
        """Replace the properties block.

        Raises :class:`BuildError` when there is no title; OpenLyrics requires
        at least one.
        """
        properties = properties or Properties()
        if not properties.titles:
            raise BuildError("a song needs at least one title")

        node: Tree = {"titles": {"title": [_title(t) for t in properties.titles]}}
        if properties.authors:
            node["authors"] = {"author": [_author(a) for a in properties.authors]}
        _set_scalars(node, properties, _SCALARS_BEFORE_TEMPO)
        if properties.tempo:
            node["tempo"] = _text_node(properties.tempo, {"@type": properties.tempo_type})
        _set_scalars(node, properties, _SCALARS_AFTER_TEMPO)
        if properties.songbooks:
            node["songbooks"] = {"songbook": [_songbook(s) for s in properties.songbooks]}
        if properties.themes:
            node["themes"] = {"theme": [_theme(t) for t in properties.themes]}
        if properties.comments:
            node["comments"] = {"comment": list(properties.comments)}

        return {**tree, "song": {**tree["song"], "properties": node}}

    def overwrite_formats(self, tree: Tree, format: dict[str, Any] | None) -> Tree:
        merged = {**tree["song"]["format"], **(format or {})}
        return {**tree, "song": {**tree["song"], "format": merged}}

    def overwrite_verses(self, tree: Tree, verses: list[Verse] | None) -> Tree:
        lyrics = {**tree["song"]["lyrics"], "verse": [_section(v) for v in verses or []]}
        return {**tree, "song": {**tree["song"], "lyrics": lyrics}}

    def overwrite_instruments(self, tree: Tree, instruments: list[Instrument] | None) -> Tree:
        if not instruments:
            return tree
        lyrics = {**tree["song"]["lyrics"], "instrument": [_section(i) for i in instruments]}
        return {**tree, "song": {**tree["song"], "lyrics": lyrics}}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _text_node(text: str, attributes: dict[str, Any]) -> Any:
    """A bare string when no attribute is set, else a dict with ``#text``."""
    present = {k: v for k, v in attributes.items() if v is not None}
    if not present:
        return text
    return {**present, "#text": text}


def _title(title: Title) -> Any:
    return _text_node(title.text, {"@lang": title.lang, "@original": title.original})


def _author(author: Author) -> Any:
    return _text_node(author.name, {"@type": author.type, "@lang": author.lang})


def _songbook(songbook: Songbook) -> Tree:
    node: Tree = {"@name": songbook.name}
    if songbook.entry is not None:
        node["@entry"] = songbook.entry
    return node


def _theme(theme: Theme) -> Any:
    return _text_node(theme.text, {"@id": theme.id, "@lang": theme.lang})


def _set_scalars(node: Tree, properties: Properties, fields: tuple[tuple[str, str], ...]) -> None:
    for field_name, tag in fields:
        value = getattr(properties, field_name)
        if value:
            node[tag] = value


def _section(section: Verse) -> Tree:
    node: Tree = {"@name": section.name}
    if section.lang:
        node["@lang"] = section.lang
    node["lines"] = [lines_markup(group) for group in section.lines]
    return node


def lines_markup(group: str) -> str:
    """Mark each newline of a line-group with ``<br/>``.

    A group that is well-formed markup (plain text, entity references,
    inline elements such as ``<chord name="G"/>``) is written as is; anything
    else is escaped as plain text.
    """
    lines = group.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    markup = "<br/>".join(lines)
    try:
        etree.fromstring(f"<lines>{markup}</lines>")
    except etree.XMLSyntaxError:
        return "<br/>".join(escape(line) for line in lines)
    return markup
