import re
import unicodedata
from dataclasses import dataclass, field
from typing import Optional

UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"
UNKNOWN_ITEM = "Unknown Item"
DEFAULT_DISC = "1"
DEFAULT_TRACK = "1"

# "1-01 Hells Bells", "-01 Hells Bells", "01 Hells Bells"
_DISC_TRACK_AND_NAME = re.compile(r"\s*([0-9]*)-?([0-9]*)\s+(.*)", re.DOTALL)
_DIGITS = re.compile(r"[0-9]+")


def normalize_for_search(text: str) -> str:
    """Folds a display string into the form used for matching.

    Decomposes the text, drops combining marks (accents, umlauts, ...), recomposes and
    case-folds it, so "Monáe", "MONÁE" and "monae" all compare equal.

    Args:
        text: The display string.

    Returns:
        str: The case-folded, diacritic-free string.
    """
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(c for c in decomposed if unicodedata.category(c) != "Mn")
    return unicodedata.normalize("NFC", stripped).casefold()


def extract_digits(text: str) -> str:
    """Returns the first run of decimal digits in `text`, or "" if there is none."""
    match = _DIGITS.search(text)
    return match.group(0) if match else ""


def _strip_extension(basename: str) -> str:
    dot = basename.rfind(".")
    return basename if dot == -1 else basename[:dot]


def split_disc_track_and_name(basename: str) -> tuple[str, str, str]:
    """Splits a basename such as "1-01 Hells Bells.m4a" into disc, track and name.

    A single leading number is a track number, "D-T" is disc and track, and a basename
    without a numeric prefix followed by whitespace is all name. The extension is not
    touched here.

    Args:
        basename: The last pathname segment.

    Returns:
        tuple[str, str, str]: Disc, track and name; missing parts are "".
    """
    match = _DISC_TRACK_AND_NAME.fullmatch(basename)
    if match is None:
        return "", "", basename
    disc, track, name = match.groups()
    if disc and not track:
        return "", disc, name
    return disc, track, name


@dataclass(frozen=True)
class PathnameInfo:
    """Metadata guessed from the `Artist/Album/[Disc-]Track Name.ext` layout."""

    artist: str = ""
    album: str = ""
    disc: str = ""
    track: str = ""
    name: str = ""


def parse_pathname(pathname: str) -> PathnameInfo:
    """Derives artist, album, disc, track and name from a relative pathname.

    Only the last three segments are considered; shallower pathnames fill in as many
    fields as they have segments for.

    Args:
        pathname: Pathname relative to the media root, using "/" as separator.

    Returns:
        PathnameInfo: The fields recovered from the pathname.
    """
    parts = pathname.split("/")
    artist = parts[-3] if len(parts) > 2 else ""
    album = parts[-2] if len(parts) > 1 else ""
    disc, track, name = split_disc_track_and_name(parts[-1])
    return PathnameInfo(
        artist=artist,
        album=album,
        disc=disc,
        track=track,
        name=_strip_extension(name),
    )


@dataclass(frozen=True)
class MediaItem:
    """One catalogued media file.

    The display fields are what a client shows; the `normalized_*` fields are derived from
    them on construction and are only used for matching. Because they are never passed in,
    they cannot drift from the display fields, and `dataclasses.replace` recomputes them.

    Attributes:
        pathname: Path relative to the media root, "/"-separated. Unique within a catalog.
        album, artist, name, disc, track, year, genre: Display metadata.
        mtime: Coarse ingestion date of the file, "YYYY-MM-DD".
    """

    pathname: str
    album: str = UNKNOWN_ALBUM
    artist: str = UNKNOWN_ARTIST
    name: str = UNKNOWN_ITEM
    disc: str = DEFAULT_DISC
    track: str = DEFAULT_TRACK
    year: str = ""
    genre: str = ""
    mtime: str = ""

    normalized_pathname: str = field(init=False, repr=False)
    normalized_album: str = field(init=False, repr=False)
    normalized_artist: str = field(init=False, repr=False)
    normalized_name: str = field(init=False, repr=False)
    normalized_disc: str = field(init=False, repr=False)
    normalized_track: str = field(init=False, repr=False)
    normalized_year: str = field(init=False, repr=False)
    normalized_genre: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        derived = {
            "normalized_pathname": normalize_for_search(self.pathname),
            "normalized_album": normalize_for_search(self.album),
            "normalized_artist": normalize_for_search(self.artist),
            "normalized_name": normalize_for_search(self.name),
            "normalized_disc": extract_digits(self.disc),
            "normalized_track": extract_digits(self.track),
            "normalized_year": extract_digits(self.year),
            "normalized_genre": normalize_for_search(self.genre),
        }
        for key, value in derived.items():
            object.__setattr__(self, key, value)

    def to_dict(self) -> dict[str, str]:
        """Returns the fields exposed to search clients."""
        return {
            "pathname": self.pathname,
            "album": self.album,
            "artist": self.artist,
            "name": self.name,
            "disc": self.disc,
            "track": self.track,
            "year": self.year,
            "genre": self.genre,
        }


def _pick(tag_value: Optional[str], fallback: str) -> str:
    if tag_value is not None:
        tag_value = str(tag_value).strip()
        if tag_value:
            return tag_value
    return fallback


def build_item(pathname: str, tags=None, mtime: str = "") -> MediaItem:
    """Merges tag metadata with pathname metadata into a MediaItem.

    Any tag field that is non-blank after trimming wins over the pathname, artist and album
    included, so a compilation whose files carry per-track artist tags is grouped by those
    tags rather than by the folder it lives in. Fields still blank afterwards get the
    "Unknown ..." placeholders and disc/track default to "1".

    Args:
        pathname: Path relative to the media root, "/"-separated.
        tags: Optional object with album/artist/name/disc/track/year/genre attributes, usually
            a `TagInfo`. Missing attributes are treated as blank.
        mtime: Coarse ingestion date, "YYYY-MM-DD".

    Returns:
        MediaItem: The merged, defaulted and normalized item.
    """
    guessed = parse_pathname(pathname)

    def tag(name: str) -> Optional[str]:
        return getattr(tags, name, None) if tags is not None else None

    return MediaItem(
        pathname=pathname,
        album=_pick(tag("album"), guessed.album) or UNKNOWN_ALBUM,
        artist=_pick(tag("artist"), guessed.artist) or UNKNOWN_ARTIST,
        name=_pick(tag("name"), guessed.name) or UNKNOWN_ITEM,
        disc=_pick(tag("disc"), guessed.disc) or DEFAULT_DISC,
        track=_pick(tag("track"), guessed.track) or DEFAULT_TRACK,
        year=_pick(tag("year"), ""),
        genre=_pick(tag("genre"), ""),
        mtime=mtime,
    )
