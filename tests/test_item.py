"""Tests for pathname parsing, tag merging and search normalization."""

from __future__ import annotations

import dataclasses

import pytest

from medialib._tags import TagInfo
from medialib.item import (
    MediaItem,
    build_item,
    extract_digits,
    normalize_for_search,
    parse_pathname,
    split_disc_track_and_name,
)


class TestSplitDiscTrackAndName:
    @pytest.mark.parametrize(
        ("basename", "disc", "track", "name"),
        [
            ("1-01 Hells Bells.m4a", "1", "01", "Hells Bells.m4a"),
            ("1-1 Hells Bells.m4a", "1", "1", "Hells Bells.m4a"),
            ("1 Hells Bells.m4a", "", "1", "Hells Bells.m4a"),
            ("01 Hells Bells.m4a", "", "01", "Hells Bells.m4a"),
            ("-1 Hells Bells.m4a", "", "1", "Hells Bells.m4a"),
            ("-01 Hells Bells.m4a", "", "01", "Hells Bells.m4a"),
            ("Hells Bells.m4a", "", "", "Hells Bells.m4a"),
            ("01   Spaced Out.mp3", "", "01", "Spaced Out.mp3"),
        ],
    )
    def test_prefixes(self, basename, disc, track, name):
        assert split_disc_track_and_name(basename) == (disc, track, name)


class TestParsePathname:
    def test_artist_album_disc_track_name(self):
        info = parse_pathname("AC_DC/Back In Black/1-01 Hells Bells.m4a")

        assert info.artist == "AC_DC"
        assert info.album == "Back In Black"
        assert info.disc == "1"
        assert info.track == "01"
        assert info.name == "Hells Bells"

    def test_only_last_three_segments_count(self):
        info = parse_pathname("Rock/Classic/AC_DC/Back In Black/02 Shoot to Thrill.m4a")

        assert info.artist == "AC_DC"
        assert info.album == "Back In Black"
        assert info.track == "02"

    def test_shallow_pathnames(self):
        assert parse_pathname("Loose Track.mp3").name == "Loose Track"
        assert parse_pathname("Loose Track.mp3").album == ""
        shallow = parse_pathname("Singles/Loose Track.mp3")
        assert shallow.album == "Singles"
        assert shallow.artist == ""

    def test_only_the_last_dot_is_an_extension(self):
        assert parse_pathname("A/B/Live at 5.30.mp3").name == "Live at 5.30"


class TestBuildItem:
    def test_pathname_only_gets_defaults(self):
        item = build_item("Loose Track.mp3")

        assert item.artist == "Unknown Artist"
        assert item.album == "Unknown Album"
        assert item.name == "Loose Track"
        assert item.disc == "1"
        assert item.track == "1"
        assert item.year == ""
        assert item.genre == ""

    def test_tags_override_pathname_for_every_field(self):
        tags = TagInfo(
            album="Back in Black (Remastered)",
            artist="AC/DC",
            name="Hells Bells",
            disc="2",
            track="7",
            year="1980",
            genre="Hard Rock",
        )
        item = build_item("Compilations/Best Of/1-01 hells_bells.m4a", tags=tags)

        assert item.artist == "AC/DC"
        assert item.album == "Back in Black (Remastered)"
        assert item.name == "Hells Bells"
        assert item.disc == "2"
        assert item.track == "7"
        assert item.year == "1980"
        assert item.genre == "Hard Rock"

    def test_blank_tags_keep_pathname_values(self):
        tags = TagInfo(album="   ", artist="", name=None, track=" \t")
        item = build_item("AC_DC/Back In Black/1-01 Hells Bells.m4a", tags=tags)

        assert item.artist == "AC_DC"
        assert item.album == "Back In Black"
        assert item.name == "Hells Bells"
        assert item.track == "01"

    def test_tag_values_are_trimmed(self):
        item = build_item("a.mp3", tags=TagInfo(artist="  Björk \n"))
        assert item.artist == "Björk"

    def test_mtime_is_kept(self):
        assert build_item("a.mp3", mtime="2024-01-31").mtime == "2024-01-31"

    def test_to_dict_exposes_display_fields_only(self):
        item = build_item("AC_DC/Back In Black/1-01 Hells Bells.m4a", mtime="2024-01-31")

        assert item.to_dict() == {
            "pathname": "AC_DC/Back In Black/1-01 Hells Bells.m4a",
            "album": "Back In Black",
            "artist": "AC_DC",
            "name": "Hells Bells",
            "disc": "1",
            "track": "01",
            "year": "",
            "genre": "",
        }


class TestNormalization:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Monáe", "monae"),
            ("monÁe", "monae"),
            ("MONÁE", "monae"),
            ("gürg", "gurg"),
            ("ALLCAPS", "allcaps"),
            ("Jóga", "joga"),
        ],
    )
    def test_normalize_for_search(self, raw, expected):
        assert normalize_for_search(raw) == expected

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("123409", "123409"),
            ("2/12", "2"),
            ("Disc 03 of 4", "03"),
            ("1980-05-03", "1980"),
            ("none", ""),
            ("", ""),
        ],
    )
    def test_extract_digits(self, raw, expected):
        assert extract_digits(raw) == expected

    def test_normalized_fields_follow_display_fields(self):
        item = build_item(
            "Janelle Monáe/The ArchAndroid/05 Cold War.mp3",
            tags=TagInfo(disc="1/2", year="2010-05-18", genre="Funk/Soul"),
        )

        assert item.normalized_artist == "janelle monae"
        assert item.normalized_album == "the archandroid"
        assert item.normalized_name == "cold war"
        assert item.normalized_pathname == "janelle monae/the archandroid/05 cold war.mp3"
        assert item.normalized_disc == "1"
        assert item.normalized_track == "05"
        assert item.normalized_year == "2010"
        assert item.normalized_genre == "funk/soul"

    def test_normalize_is_idempotent(self):
        for text in ("Monáe", "Ünïcödé Ärtist", "plain", "ß"):
            once = normalize_for_search(text)
            assert normalize_for_search(once) == once

    def test_rebuilding_an_item_from_its_fields_is_idempotent(self):
        item = build_item(
            "Björk/Homogenic/1-03 Jóga.flac",
            tags=TagInfo(year="1997", genre="Électronique"),
            mtime="2023-12-24",
        )
        again = build_item(
            item.pathname,
            tags=TagInfo(
                album=item.album,
                artist=item.artist,
                name=item.name,
                disc=item.disc,
                track=item.track,
                year=item.year,
                genre=item.genre,
            ),
            mtime=item.mtime,
        )

        assert again == item

    def test_replace_recomputes_normalized_fields(self):
        item = build_item("AC_DC/Back In Black/1-01 Hells Bells.m4a")
        renamed = dataclasses.replace(item, artist="Motörhead")

        assert renamed.normalized_artist == "motorhead"

    def test_items_are_immutable(self):
        item = MediaItem(pathname="a.mp3")
        with pytest.raises(dataclasses.FrozenInstanceError):
            item.artist = "Someone"  # type: ignore[misc]
