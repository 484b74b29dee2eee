from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class User:
    id: str
    display_name: str
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=data.get("id") or "",
            display_name=data.get("display_name") or data.get("id") or "",
            raw=data,
        )


@dataclass
class Device:
    id: str
    name: str
    type: str = ""
    is_active: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Device":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            type=data.get("type") or "",
            is_active=bool(data.get("is_active")),
            raw=data,
        )


def _track_total(data: Dict[str, Any]) -> int:
    # Newer payloads report the count under "items", older ones under "tracks".
    tracks: Optional[Dict[str, Any]] = data.get("tracks") or data.get("items")
    if isinstance(tracks, dict):
        return int(tracks.get("total") or 0)
    return 0


@dataclass
class PlaylistSummary:
    id: str
    name: str
    owner: str = ""
    track_count: int = 0
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PlaylistSummary":
        owner = data.get("owner") or {}
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            owner=owner.get("display_name") or owner.get("id") or "",
            track_count=_track_total(data),
            raw=data,
        )


@dataclass
class Playlist:
    id: str
    name: str
    track_count: int = 0
    raw: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Playlist":
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            track_count=_track_total(data),
            raw=data,
        )
