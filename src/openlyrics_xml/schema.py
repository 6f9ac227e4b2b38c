"""Tree-shape rules for OpenLyrics documents.

Everything that makes the generic tree engine OpenLyrics-aware lives here
as data: which paths are always lists, which elements are read as raw
markup, and how that markup is turned into line text.
"""

import re

from .xmltree import BuildOptions, ParseOptions

# Paths that are lists in the tree even when the element occurs once.
ALWAYS_ARRAY = frozenset({
    "song.properties.titles.title",
    "song.properties.titles.title.text",
    "song.properties.authors.author",
    "song.properties.comments.comment",
    "song.properties.songbooks.songbook",
    "song.properties.themes.theme",
    "song.lyrics.verse",
    "song.lyrics.verse.lines",
    "song.lyrics.instrument",
    "song.lyrics.instrument.lines",
})

# <lines> bodies mix text with <br> markup that is often not well-formed,
# so they are read verbatim and cleaned up by normalize_lines().
LINE_PATHS = frozenset({
    "song.lyrics.verse.lines",
    "song.lyrics.instrument.lines",
})

# Tags written as <tag .../> when they have no content.
UNPAIRED_TAGS = frozenset({"songbook"})

# <br>, <br/>, <br />, </br>, < BR >, ... plus one newline that may follow it
BREAK_RE = re.compile(r"<\s*/?\s*br\s*/?\s*>(?:\r\n|\r|\n)?", re.IGNORECASE)

# Only terminated comments; an unclosed "<!--" is left as text.
COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)


def normalize_lines(raw: str) -> str:
    """Turn the raw body of a ``<lines>`` element into a line-group.

    Breaks become ``\\n`` and comments are dropped. Inline markup such as
    ``<chord name="G"/>`` and entity references are kept as written.

    >>> normalize_lines("Line one<br/>\\nLine two<!-- chorus -->")
    'Line one\\nLine two'
    """
    text = BREAK_RE.sub("\n", raw)
    text = COMMENT_RE.sub("", text)
    return text.strip()


def line_value_processor(tag: str, value: str, path: str) -> str | None:
    if path in LINE_PATHS:
        return normalize_lines(value)
    return None


def parse_options() -> ParseOptions:
    return ParseOptions(
        always_array=ALWAYS_ARRAY,
        stop_nodes=LINE_PATHS,
        value_processor=line_value_processor,
    )


def build_options() -> BuildOptions:
    return BuildOptions(
        pretty=True,
        unpaired_tags=UNPAIRED_TAGS,
        markup_paths=LINE_PATHS,
    )
