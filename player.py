import logging
import random
import time
from typing import Callable, Optional, Sequence, TextIO

from device import find_device, select_device
from errors import NoDevicesError, RemoteAPIError, ValidationError
from models import Device
from playlist import resolve_playlist_id, resolve_playlist_id_quiet
from spot import Session
from spotify_config import SHUFFLE_SETTLE_SECONDS

logger = logging.getLogger(__name__)

PAUSED_MESSAGE = "Playback paused"


class PlaybackCommander:
    """
    Starts a playlist on a Connect device or pauses playback, on behalf of
    both the CLI and the HTTP API.

    With `out` set, the device list, the chosen device and the playlist
    search are narrated to it (CLI). Without it the commander is silent.
    """

    def __init__(
        self,
        session: Session,
        out: Optional[TextIO] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.session = session
        self.out = out
        self.sleep = sleep
        self.rng = rng or random.Random()

    def _say(self, message: str) -> None:
        if self.out is not None:
            print(message, file=self.out)

    def _pick_device(self, devices: Sequence[Device], device_hint: str) -> Device:
        if self.out is None:
            return select_device(devices, device_hint)

        self._say("\nAvailable devices:")
        for i, device in enumerate(devices, start=1):
            self._say(f"  {i}. {device.name} ({device.type}) - Active: {device.is_active}")

        target = find_device(devices, device_hint)
        if target is not None:
            self._say(f"\nUsing specified device: {target.name}")
            return target

        target = select_device(devices, device_hint)
        prefix = f"\nDevice '{device_hint}' not found. " if device_hint else ""
        self._say(f"{prefix}Using device: {target.name}")
        return target

    def play(self, device_hint: str, playlist_hint: str, shuffle: bool = False) -> str:
        client = self.session.require()

        devices = client.devices()
        if not devices:
            raise NoDevicesError()

        target = self._pick_device(devices, device_hint)

        if self.out is None:
            playlist_id = resolve_playlist_id_quiet(playlist_hint, client)
        else:
            playlist_id = resolve_playlist_id(playlist_hint, client, out=self.out)

        playlist = client.playlist(playlist_id)
        track_count = playlist.track_count
        context_uri = f"spotify:playlist:{playlist_id}"

        if not shuffle:
            client.start_playback(device_id=target.id, context_uri=context_uri, position=0)
            logger.info("Started %s on %s from the top", playlist_id, target.name)
            return f'Now playing "{playlist.name}" on {target.name} (starting at track 1)'

        # randrange(0) would blow up with a bare ValueError; report it plainly instead.
        if track_count <= 0:
            raise ValidationError(f'playlist "{playlist.name}" has no tracks to shuffle')

        offset = self.rng.randrange(track_count)
        client.start_playback(device_id=target.id, context_uri=context_uri, position=offset)
        logger.info("Started %s on %s at offset %d", playlist_id, target.name, offset)

        self.sleep(SHUFFLE_SETTLE_SECONDS)

        try:
            client.shuffle(True, device_id=target.id)
        except RemoteAPIError as e:
            # Playback is already running; a missing shuffle is not fatal.
            logger.warning("Failed to enable shuffle: %s", e)
        else:
            self._say("Shuffle mode enabled")

        return (
            f'Now playing "{playlist.name}" on {target.name} '
            f"(shuffle enabled, starting at track {offset + 1} of {track_count})"
        )

    def pause(self) -> str:
        client = self.session.require()
        client.pause()
        return PAUSED_MESSAGE
