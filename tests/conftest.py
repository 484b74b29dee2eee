from typing import List, Optional

import pytest

from errors import RemoteAPIError
from models import Device, Playlist, PlaylistSummary, User
from spot import Session


class FakeSpotifyClient:
    """In-memory SpotifyClient that records every call it receives."""

    def __init__(self, devices=None, playlists=None, track_count=50, playlist_name="Test Playlist"):
        self.device_list: List[Device] = list(devices) if devices is not None else [
            Device(id="device123", name="Living Room Speaker", type="Speaker", is_active=True),
            Device(id="device456", name="Kitchen Speaker", type="Speaker", is_active=False),
        ]
        self.library: List[PlaylistSummary] = list(playlists) if playlists is not None else [
            PlaylistSummary(id="playlist123", name="Test Playlist"),
            PlaylistSummary(id="playlist456", name="Another Playlist"),
        ]
        self.track_count = track_count
        self.playlist_name = playlist_name
        self.calls: List[tuple] = []
        self.fail: dict = {}

    def _maybe_fail(self, name):
        if name in self.fail:
            raise self.fail[name]

    def current_user(self) -> User:
        self.calls.append(("current_user",))
        self._maybe_fail("current_user")
        return User(id="testuser123", display_name="Test User")

    def current_user_playlists(self, limit: int, offset: int) -> List[PlaylistSummary]:
        self.calls.append(("current_user_playlists", limit, offset))
        self._maybe_fail("current_user_playlists")
        return self.library[offset:offset + limit]

    def devices(self) -> List[Device]:
        self.calls.append(("devices",))
        self._maybe_fail("devices")
        return list(self.device_list)

    def playlist(self, playlist_id: str) -> Playlist:
        self.calls.append(("playlist", playlist_id))
        self._maybe_fail("playlist")
        return Playlist(id=playlist_id, name=self.playlist_name, track_count=self.track_count)

    def start_playback(self, device_id: str, context_uri: str, position: int) -> None:
        self.calls.append(("start_playback", device_id, context_uri, position))
        self._maybe_fail("start_playback")

    def pause(self) -> None:
        self.calls.append(("pause",))
        self._maybe_fail("pause")

    def shuffle(self, state: bool, device_id: Optional[str] = None) -> None:
        self.calls.append(("shuffle", state, device_id))
        self._maybe_fail("shuffle")

    def called(self, name):
        return [c for c in self.calls if c[0] == name]


@pytest.fixture()
def fake_client():
    return FakeSpotifyClient()


@pytest.fixture()
def session(fake_client):
    return Session(fake_client)


@pytest.fixture()
def api_error():
    return RemoteAPIError("failed to get playlists: API error")
