import logging
import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional, Protocol

import requests
import spotipy
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyOauthError

from errors import NotAuthenticatedError, RemoteAPIError
from models import Device, Playlist, PlaylistSummary, User

logger = logging.getLogger("Spotify_Handler")


class SpotifyClient(Protocol):
    """The slice of the Spotify Web API the shortcut depends on."""

    def current_user(self) -> User: ...

    def current_user_playlists(self, limit: int, offset: int) -> List[Optional[PlaylistSummary]]: ...

    def devices(self) -> List[Device]: ...

    def playlist(self, playlist_id: str) -> Playlist: ...

    def start_playback(self, device_id: str, context_uri: str, position: int) -> None: ...

    def pause(self) -> None: ...

    def shuffle(self, state: bool, device_id: Optional[str] = None) -> None: ...


@contextmanager
def _remote_call(description: str) -> Iterator[None]:
    try:
        yield
    except (SpotifyException, SpotifyOauthError, requests.exceptions.RequestException) as e:
        logger.debug("Spotify API call '%s' failed: %s", description, e)
        raise RemoteAPIError(f"failed to {description}: {e}") from e


class SpotipyClient:
    """SpotifyClient backed by spotipy; token refresh is left to the auth manager."""

    def __init__(self, sp: spotipy.Spotify):
        self.sp = sp

    @classmethod
    def from_auth_manager(cls, auth_manager) -> "SpotipyClient":
        return cls(spotipy.Spotify(auth_manager=auth_manager))

    def current_user(self) -> User:
        with _remote_call("get current user"):
            return User.from_api(self.sp.current_user())

    def current_user_playlists(self, limit: int, offset: int) -> List[Optional[PlaylistSummary]]:
        """One page of playlists. Null entries Spotify returns stay as None so the page keeps its length."""
        with _remote_call("get playlists"):
            page = self.sp.current_user_playlists(limit=limit, offset=offset)
        return [PlaylistSummary.from_api(item) if item else None for item in (page or {}).get("items", [])]

    def devices(self) -> List[Device]:
        with _remote_call("get devices"):
            payload = self.sp.devices()
        return [Device.from_api(d) for d in (payload or {}).get("devices", [])]

    def playlist(self, playlist_id: str) -> Playlist:
        with _remote_call("get playlist"):
            return Playlist.from_api(self.sp.playlist(playlist_id))

    def start_playback(self, device_id: str, context_uri: str, position: int) -> None:
        with _remote_call("start playback"):
            self.sp.start_playback(
                device_id=device_id,
                context_uri=context_uri,
                offset={"position": position},
            )

    def pause(self) -> None:
        with _remote_call("pause playback"):
            self.sp.pause_playback()

    def shuffle(self, state: bool, device_id: Optional[str] = None) -> None:
        with _remote_call("set shuffle"):
            self.sp.shuffle(state, device_id=device_id)


class Session:
    """
    Holds the one authenticated client shared by the CLI or the HTTP server.
    The client can be swapped by a completing OAuth callback while requests
    are in flight; readers always see either the old or the new client.
    """

    def __init__(self, client: Optional[SpotifyClient] = None):
        self._lock = threading.Lock()
        self._client = client

    def get(self) -> Optional[SpotifyClient]:
        with self._lock:
            return self._client

    def require(self) -> SpotifyClient:
        client = self.get()
        if client is None:
            raise NotAuthenticatedError()
        return client

    def replace(self, client: Optional[SpotifyClient]) -> None:
        with self._lock:
            self._client = client
        logger.info("Spotify session %s.", "updated" if client is not None else "cleared")

    def clear(self) -> None:
        self.replace(None)

    @property
    def authenticated(self) -> bool:
        return self.get() is not None
