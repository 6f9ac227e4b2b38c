import dataclasses

import pytest

from openlyrics_xml.models import Instrument, Meta, Properties, Song, Songbook, Title, Verse


def test_song_defaults():
    song = Song()
    assert song.meta == Meta()
    assert song.properties == Properties()
    assert song.format == {}
    assert song.verses == []
    assert song.instruments == []


def test_meta_defaults_all_none():
    meta = Meta()
    assert meta.lang is None
    assert meta.created_in is None
    assert meta.modified_in is None
    assert meta.modified_date is None


def test_properties_sequences_default_empty():
    props = Properties()
    assert props.titles == []
    assert props.authors == []
    assert props.comments == []
    assert props.songbooks == []
    assert props.themes == []
    assert props.copyright is None


def test_title_optional_fields():
    title = Title("Amazing Grace")
    assert title.original is None
    assert title.lang is None


def test_songbook_entry_optional():
    assert Songbook(name="Hymnal").entry is None


def test_verse_stores_lines():
    verse = Verse(name="v1", lines=["Line one\nLine two"])
    assert verse.lines == ["Line one\nLine two"]
    assert verse.lang is None


def test_instrument_is_not_equal_to_verse_with_same_content():
    assert Instrument(name="i1", lines=["x"]) != Verse(name="i1", lines=["x"])


def test_models_are_frozen():
    song = Song()
    with pytest.raises(dataclasses.FrozenInstanceError):
        song.verses = []
