"""Shared pytest fixtures for the media library tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from medialib._tags import TagInfo
from medialib.catalog import Catalog
from medialib.item import MediaItem, build_item

# ============================================================================
# Media tree helpers
# ============================================================================


def write_media(root: Path, pathname: str, payload: bytes = b"\x00" * 32) -> Path:
    """Create a dummy media file at `root/pathname` (content is never parsed)."""
    path = root / pathname
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    return path


def set_tree_mtime(root: Path, mtime: float) -> None:
    """Set the mtime of every immediate subdirectory of `root`."""
    for entry in root.iterdir():
        if entry.is_dir() and not entry.name.startswith("."):
            os.utime(entry, (mtime, mtime))


class FakeTagReader:
    """Tag reader stand-in keyed by basename; records every path it was asked about."""

    def __init__(self, tags: dict[str, TagInfo | None] | None = None):
        self.tags = tags or {}
        self.calls: list[Path] = []

    def __call__(self, path: Path, logger=None) -> TagInfo | None:
        self.calls.append(path)
        return self.tags.get(path.name)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def media_root(tmp_path: Path) -> Path:
    """A small library: two artists, one video, plus junk the scanner must ignore."""
    root = tmp_path / "media"
    write_media(root, "AC_DC/Back In Black/1-01 Hells Bells.m4a")
    write_media(root, "AC_DC/Back In Black/1-02 Shoot to Thrill.m4a")
    write_media(root, "Janelle Monáe/The ArchAndroid/05 Cold War.mp3")
    write_media(root, "Videos/Concerts/Live at Donington.mkv")
    write_media(root, "AC_DC/Back In Black/cover.jpg")
    write_media(root, "AC_DC/Back In Black/.hidden.mp3")
    write_media(root, ".trash/Deleted/01 Gone.mp3")
    write_media(root, "Empty/Album/01 Nothing.mp3", payload=b"")
    return root


@pytest.fixture
def tag_reader() -> FakeTagReader:
    return FakeTagReader()


@pytest.fixture
def sample_items() -> list[MediaItem]:
    return [
        build_item(
            "AC_DC/Back In Black/1-01 Hells Bells.m4a",
            tags=TagInfo(artist="AC/DC", year="1980", genre="Hard Rock"),
            mtime="2024-03-01",
        ),
        build_item("Janelle Monáe/The ArchAndroid/05 Cold War.mp3", mtime="2024-02-11"),
        build_item("Björk/Homogenic/1-03 Jóga.flac", mtime="2023-12-24"),
        build_item("Videos/Concerts/Live at Donington.mkv", mtime="2021-07-04"),
    ]


@pytest.fixture
def sample_catalog(sample_items: list[MediaItem]) -> Catalog:
    return Catalog(items=tuple(sample_items), synced_at=1700000000.0)
