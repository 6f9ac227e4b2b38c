"""Top-level parse/build entry points.

Usage::

    from openlyrics_xml import build_document, parse_document

    song = parse_document(Path("amazing-grace.xml").read_text(encoding="utf-8"))
    xml_text = build_document(song)
"""

import logging

from . import xmltree
from .builder import DefaultsMerger
from .exceptions import ParseError
from .models import Song
from .reader import SongReader
from .schema import build_options, parse_options

logger = logging.getLogger(__name__)


def parse_document(text: str) -> Song:
    """Parse OpenLyrics XML *text* into a :class:`~openlyrics_xml.models.Song`.

    Raises ParseError if the text is not well-formed XML, the root element is
    not ``<song>``, or a required section is missing.
    """
    tree = xmltree.parse(text, parse_options())
    if "song" not in tree:
        root = next(iter(tree))
        raise ParseError(f"root element must be <song>, found <{root}>")

    song_node = tree["song"]
    if not isinstance(song_node, dict):
        raise ParseError("<song> has no content")
    return SongReader().read(song_node)


def build_document(song: Song | None = None) -> str:
    """Render *song* as OpenLyrics 0.9 XML text.

    Missing optional data is filled in with defaults or left out; see
    :mod:`openlyrics_xml.builder`.

    Raises BuildError if the song has no title. OpenLyrics requires one, so
    this refuses to write a document other readers would reject rather than
    emitting it silently. ``build_document()`` and ``build_document(Song())``
    therefore raise as well.
    """
    tree = DefaultsMerger().merge(song or Song())
    text = xmltree.build(tree, build_options()).strip()
    logger.debug("Built OpenLyrics document (%d characters)", len(text))
    return text
