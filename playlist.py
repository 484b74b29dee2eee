import logging
from typing import Iterator, List, Optional, TextIO

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from errors import PlaylistResolutionError, RemoteAPIError
from models import PlaylistSummary
from spot import SpotifyClient
from spotify_config import (
    PLAYLIST_ID_LENGTH,
    PLAYLIST_LINK_MARKER,
    PLAYLIST_PAGE_SIZE,
    PLAYLIST_PATH_SEGMENT,
)

logger = logging.getLogger(__name__)


def extract_playlist_id(text: str) -> str:
    """
    Pulls the ID out of a share link such as
    https://open.spotify.com/playlist/37i9dQZF1DXcBWIGoYBM5M?si=xxx.
    Anything that is not a playlist link is returned as-is.
    """
    if PLAYLIST_LINK_MARKER in text:
        _, _, tail = text.partition(PLAYLIST_PATH_SEGMENT)
        return tail.split("?", 1)[0]
    return text


def iter_user_playlists(client: SpotifyClient, page_size: int = PLAYLIST_PAGE_SIZE) -> Iterator[PlaylistSummary]:
    """Yields the current user's playlists in the order Spotify pages them."""
    offset = 0
    while True:
        page = client.current_user_playlists(limit=page_size, offset=offset)
        yield from (p for p in page if p is not None)
        # The stop check counts null entries too, as Spotify sent them.
        if len(page) < page_size:
            return
        offset += page_size


def list_playlists(client: SpotifyClient) -> List[PlaylistSummary]:
    return list(iter_user_playlists(client))


def _looks_like_id(text: str) -> bool:
    # Length/space heuristic only: a 22 character name without spaces is
    # treated as an ID and never searched for.
    return len(text) == PLAYLIST_ID_LENGTH and " " not in text


def resolve_playlist_id(text: str, client: SpotifyClient, out: Optional[TextIO] = None) -> str:
    """
    Resolves a playlist link, ID or name to a playlist ID.

    Links win, then anything shaped like an ID, then the first playlist in
    the user's library whose name matches case-insensitively (or whose ID
    matches exactly). When nothing matches the input is handed back
    unchanged so Spotify can reject it on playback.

    Progress is written to `out` when given.
    """

    def say(message: str) -> None:
        if out is not None:
            print(message, file=out)

    if PLAYLIST_LINK_MARKER in text:
        return extract_playlist_id(text)

    if _looks_like_id(text):
        return text

    say(f'Searching for playlist: "{text}"...')
    wanted = text.lower()
    try:
        for playlist in iter_user_playlists(client):
            if playlist.name.lower() == wanted:
                say(f'Found playlist: "{playlist.name}" (ID: {playlist.id})')
                return playlist.id
            if playlist.id == text:
                return text
    except RemoteAPIError as e:
        raise PlaylistResolutionError(f"failed to resolve playlist: {e}") from e

    logger.debug("No playlist named %r; passing it through as an ID", text)
    say(f'No playlist found with name "{text}", trying as ID...')
    return text


def resolve_playlist_id_quiet(text: str, client: SpotifyClient) -> str:
    """Same matching as `resolve_playlist_id`, without narration. Used by the API."""
    return resolve_playlist_id(text, client, out=None)


def render_playlists_table(playlists: List[PlaylistSummary], console: Optional[Console] = None) -> None:
    console = console or Console()

    console.print()
    console.print("🎵 Your Spotify Playlists", style="cyan")
    console.print()

    table = Table(box=box.ROUNDED)
    for column in ("#", "Name", "Tracks", "Owner", "Playlist ID"):
        table.add_column(column)

    for i, playlist in enumerate(playlists, start=1):
        table.add_row(
            str(i),
            Text(playlist.name, style="bold"),
            str(playlist.track_count),
            Text(playlist.owner),
            Text(playlist.id, style="bright_black"),
        )

    console.print(table)
    console.print()
    console.print(f"Total playlists: {len(playlists)}", style="bold green")
