import pytest

from openlyrics_xml.exceptions import ParseError
from openlyrics_xml.models import Author, Instrument, Meta, Songbook, Theme, Title, Verse
from openlyrics_xml.reader import SongReader


def _song_node(**overrides):
    node = {
        "@xmlns": "http://openlyrics.info/namespace/2009/song",
        "@version": "0.9",
        "properties": {"titles": {"title": ["Amazing Grace"]}},
        "format": "",
        "lyrics": {"verse": [{"@name": "v1", "lines": ["Line one\nLine two"]}]},
    }
    node.update(overrides)
    return node


# ---------------------------------------------------------------------------
# read — required sections
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("section", ["properties", "format", "lyrics"])
def test_missing_section_raises(section):
    node = _song_node()
    del node[section]
    with pytest.raises(ParseError, match=section):
        SongReader().read(node)


def test_read_does_not_mutate_input():
    node = _song_node(format={"tags": {"@application": "OpenLP"}})
    before = repr(node)
    song = SongReader().read(node)
    assert repr(node) == before
    assert song.format is not node["format"]


def test_read_empty_lyrics():
    song = SongReader().read(_song_node(lyrics=""))
    assert song.verses == []
    assert song.instruments == []


# ---------------------------------------------------------------------------
# read_meta
# ---------------------------------------------------------------------------


def test_read_meta_all_fields():
    node = {
        "@xml:lang": "en",
        "@createdIn": "OpenLP",
        "@modifiedIn": "Editor",
        "@modifiedDate": "2012-04-10T22:00:00+10:00",
        "@version": "0.9",
        "@chordNotation": "german",
    }
    assert SongReader().read_meta(node) == Meta(
        lang="en",
        created_in="OpenLP",
        modified_in="Editor",
        modified_date="2012-04-10T22:00:00+10:00",
        version="0.9",
        chord_notation="german",
    )


def test_read_meta_absent_attributes_are_none():
    meta = SongReader().read_meta({"@version": "0.9"})
    assert meta.lang is None
    assert meta.created_in is None
    assert meta.modified_in is None
    assert meta.modified_date is None


# ---------------------------------------------------------------------------
# read_properties
# ---------------------------------------------------------------------------


def test_read_titles_plain_and_attributed():
    props = SongReader().read_properties({
        "titles": {"title": [
            {"@lang": "en", "@original": "true", "#text": "Amazing Grace"},
            "Erstaunliche Gnade",
        ]},
    })
    assert props.titles == [
        Title(text="Amazing Grace", original=True, lang="en"),
        Title(text="Erstaunliche Gnade"),
    ]


def test_read_title_original_false():
    props = SongReader().read_properties({"titles": {"title": [{"@original": "false", "#text": "X"}]}})
    assert props.titles[0].original is False


def test_read_authors_keep_order_and_attributes():
    props = SongReader().read_properties({
        "authors": {"author": [
            {"@type": "words", "#text": "John Newton"},
            {"@type": "translation", "@lang": "de", "#text": "Someone"},
            "Anonymous",
        ]},
    })
    assert props.authors == [
        Author(name="John Newton", type="words"),
        Author(name="Someone", type="translation", lang="de"),
        Author(name="Anonymous"),
    ]


def test_read_comments_songbooks_themes():
    props = SongReader().read_properties({
        "comments": {"comment": ["first", "second"]},
        "songbooks": {"songbook": [{"@name": "Hymnal"}, {"@name": "Psalter", "@entry": "48"}]},
        "themes": {"theme": ["Adoration", {"@id": "7", "@lang": "de", "#text": "Anbetung"}]},
    })
    assert props.comments == ["first", "second"]
    assert props.songbooks == [Songbook(name="Hymnal"), Songbook(name="Psalter", entry="48")]
    assert props.themes == [Theme(text="Adoration"), Theme(text="Anbetung", id="7", lang="de")]


def test_read_scalar_properties():
    props = SongReader().read_properties({
        "copyright": "public domain",
        "ccliNo": "4755360",
        "tempo": {"@type": "bpm", "#text": "90"},
        "key": "G",
        "verseOrder": "v1 c v2",
    })
    assert props.copyright == "public domain"
    assert props.ccli_no == "4755360"
    assert props.tempo == "90"
    assert props.tempo_type == "bpm"
    assert props.key == "G"
    assert props.verse_order == "v1 c v2"
    assert props.publisher is None


def test_read_properties_empty_node():
    props = SongReader().read_properties("")
    assert props.titles == []
    assert props.authors == []


# ---------------------------------------------------------------------------
# read_format
# ---------------------------------------------------------------------------


def test_read_format_copies_mapping():
    node = {"tags": {"@application": "OpenLP", "tag": {"@name": "red"}}}
    result = SongReader().read_format(node)
    assert result == node
    assert result["tags"] is not node["tags"]


def test_read_format_empty_element():
    assert SongReader().read_format("") == {}


# ---------------------------------------------------------------------------
# read_verses / read_instruments
# ---------------------------------------------------------------------------


def test_read_verses():
    verses = SongReader().read_verses([
        {"@name": "v1", "lines": ["a\nb", "c"]},
        {"@name": "v2", "@lang": "de", "lines": ["d"]},
    ])
    assert verses == [
        Verse(name="v1", lines=["a\nb", "c"]),
        Verse(name="v2", lang="de", lines=["d"]),
    ]


def test_read_verse_without_lines():
    assert SongReader().read_verses([{"@name": "v1"}]) == [Verse(name="v1")]


def test_read_lines_with_attributes_keep_text():
    verses = SongReader().read_verses([{"@name": "v1", "lines": [{"@part": "men", "#text": "a\nb"}]}])
    assert verses[0].lines == ["a\nb"]


def test_read_instruments():
    instruments = SongReader().read_instruments([{"@name": "i1", "lines": ["riff"]}])
    assert instruments == [Instrument(name="i1", lines=["riff"])]


def test_read_meta_empty_attributes_are_none():
    node = {"@xml:lang": "", "@createdIn": "", "@modifiedIn": "", "@modifiedDate": "", "@version": "0.9"}
    assert SongReader().read_meta(node) == Meta(version="0.9")
