"""Catalog model: artists own albums, albums own tracks.

The catalog is the read-only substrate the question generator works on. It is
normally loaded once per run from the static ``songs.json`` document::

    {"artists": [{"id", "name", "albums": [{"id", "name", "jacketUrl",
        "tracks": [{"id", "title", "youtubeUrl", "duration"?, "midpointStart"?}]}]}]}
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised when a catalog document does not have the expected shape."""


@dataclass(frozen=True, slots=True)
class MidpointStart:
    """The clip start was chosen by hand."""

    seconds: float


@dataclass(frozen=True, slots=True)
class DurationWindow:
    """Only the track length is known; the clip comes from its middle."""

    duration_s: float


@dataclass(frozen=True, slots=True)
class NoTiming:
    """No timing metadata at all."""


StartHint = MidpointStart | DurationWindow | NoTiming


@dataclass(frozen=True, slots=True)
class Track:
    id: str
    title: str
    media_url: str
    duration_s: float | None = None
    midpoint_start_s: float | None = None

    @property
    def start_hint(self) -> StartHint:
        # Priority: explicit midpoint, then duration, then nothing.
        if self.midpoint_start_s is not None:
            return MidpointStart(self.midpoint_start_s)
        if self.duration_s is not None:
            return DurationWindow(self.duration_s)
        return NoTiming()


@dataclass(frozen=True, slots=True)
class Album:
    id: str
    name: str
    cover_url: str
    tracks: tuple[Track, ...] = ()


@dataclass(frozen=True, slots=True)
class Artist:
    id: str
    name: str
    albums: tuple[Album, ...] = ()


@dataclass(frozen=True, slots=True)
class Catalog:
    artists: tuple[Artist, ...] = ()

    def iter_sources(self) -> Iterator[tuple[Track, Album, Artist]]:
        """Yield every (track, album, artist) triple in catalog order."""

        for artist in self.artists:
            for album in artist.albums:
                for track in album.tracks:
                    yield track, album, artist

    def track_count(self) -> int:
        return sum(len(album.tracks) for artist in self.artists for album in artist.albums)

    def find_album(self, album_id: str) -> tuple[Album, Artist] | None:
        for artist in self.artists:
            for album in artist.albums:
                if album.id == album_id:
                    return album, artist
        return None


def _require(obj: Mapping[str, Any], key: str, kind: type | tuple[type, ...], where: str) -> Any:
    if not isinstance(obj, Mapping):
        raise CatalogError(f"{where}: expected an object, got {obj!r}")
    if key not in obj:
        raise CatalogError(f"{where}: missing key {key!r}")
    value = obj[key]
    if isinstance(value, bool) or not isinstance(value, kind):
        raise CatalogError(f"{where}.{key}: unexpected value {value!r}")
    return value


def _optional_number(obj: Mapping[str, Any], key: str, where: str) -> float | None:
    value = obj.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise CatalogError(f"{where}.{key}: expected a number, got {value!r}")
    if not math.isfinite(value):
        raise CatalogError(f"{where}.{key}: must be finite, got {value!r}")
    if value < 0:
        raise CatalogError(f"{where}.{key}: must be >= 0, got {value!r}")
    return value


def _track_from_dict(obj: Mapping[str, Any], where: str) -> Track:
    track = Track(
        id=str(_require(obj, "id", (str, int), where)),
        title=_require(obj, "title", str, where),
        media_url=_require(obj, "youtubeUrl", str, where),
        duration_s=_optional_number(obj, "duration", where),
        midpoint_start_s=_optional_number(obj, "midpointStart", where),
    )
    # A clip must start inside the track whenever its length is known.
    if track.duration_s is not None:
        if track.duration_s <= 0:
            raise CatalogError(f"{where}.duration: must be > 0, got {track.duration_s!r}")
        if track.midpoint_start_s is not None and track.midpoint_start_s >= track.duration_s:
            raise CatalogError(
                f"{where}.midpointStart: {track.midpoint_start_s!r} is not before the end ({track.duration_s!r})"
            )
    return track


def _album_from_dict(obj: Mapping[str, Any], where: str) -> Album:
    tracks = _require(obj, "tracks", list, where)
    parsed = tuple(_track_from_dict(t, f"{where}.tracks[{i}]") for i, t in enumerate(tracks))
    seen: set[str] = set()
    for track in parsed:
        if track.id in seen:
            raise CatalogError(f"{where}: duplicate track id {track.id!r}")
        seen.add(track.id)
    return Album(
        id=str(_require(obj, "id", (str, int), where)),
        name=_require(obj, "name", str, where),
        cover_url=str(obj.get("jacketUrl", "")),
        tracks=parsed,
    )


def _artist_from_dict(obj: Mapping[str, Any], where: str) -> Artist:
    albums = _require(obj, "albums", list, where)
    parsed = tuple(_album_from_dict(a, f"{where}.albums[{i}]") for i, a in enumerate(albums))
    ids = [album.id for album in parsed]
    if len(ids) != len(set(ids)):
        raise CatalogError(f"{where}: duplicate album id")
    return Artist(
        id=str(_require(obj, "id", (str, int), where)),
        name=_require(obj, "name", str, where),
        albums=parsed,
    )


def catalog_from_dict(data: Mapping[str, Any]) -> Catalog:
    """Build a Catalog from the decoded ``songs.json`` document."""

    if not isinstance(data, Mapping):
        raise CatalogError("catalog: expected a JSON object")
    artists = _require(data, "artists", list, "catalog")
    return Catalog(
        artists=tuple(_artist_from_dict(a, f"artists[{i}]") for i, a in enumerate(artists))
    )


def load_catalog(path: Path) -> Catalog:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"{path}: invalid JSON ({exc})") from exc

    catalog = catalog_from_dict(data)
    logger.info(
        "Loaded catalog %s: %d artists, %d tracks",
        path,
        len(catalog.artists),
        catalog.track_count(),
    )
    return catalog
