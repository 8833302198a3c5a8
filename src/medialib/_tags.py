from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from tinytag import TinyTag

from common.logging import Logger, NullLogger


@dataclass(frozen=True, slots=True)
class TagInfo:
    """Embedded tag metadata of one audio file.

    Every field is the raw tag value as a string, or None when the tag is absent. Trimming
    and defaulting happen in `build_item`.
    """

    album: Optional[str] = None
    artist: Optional[str] = None
    name: Optional[str] = None
    disc: Optional[str] = None
    track: Optional[str] = None
    year: Optional[str] = None
    genre: Optional[str] = None


def _as_text(value) -> Optional[str]:
    return None if value is None else str(value)


def read_tags(path: Path, logger: Logger | None = None) -> Optional[TagInfo]:
    """Reads album, artist, title, disc, track, year and genre tags from an audio file.

    Unsupported or corrupt tag data is not an error: it is logged and None is returned so
    the caller can fall back to pathname metadata. Failing to open the file is an error and
    propagates as OSError.

    Args:
        path: Absolute path of the audio file.
        logger: Optional logger for tag parsing problems.

    Returns:
        TagInfo | None: The tags found, or None when they could not be parsed.

    Raises:
        OSError: If the file cannot be opened or read.
    """
    logger = logger or NullLogger()
    try:
        tag = TinyTag.get(path, tags=True, duration=False)
    except OSError:
        raise
    except Exception as e:
        logger.warning(f"Unreadable tags in {path}: {e}")
        return None

    return TagInfo(
        album=_as_text(getattr(tag, "album", None)),
        artist=_as_text(getattr(tag, "artist", None) or getattr(tag, "albumartist", None)),
        name=_as_text(getattr(tag, "title", None)),
        disc=_as_text(getattr(tag, "disc", None)),
        track=_as_text(getattr(tag, "track", None)),
        year=_as_text(getattr(tag, "year", None)),
        genre=_as_text(getattr(tag, "genre", None)),
    )
