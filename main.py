import argparse
import json
import logging
import sys
from typing import Any, Iterable, List, Optional

import colorama
from colorama import Fore, Style

from auth import authenticate_interactive, build_oauth, load_cached_client
from config import AppConfig, load_config
from device import render_devices_table
from errors import NoDevicesError, RemoteAPIError, ShortcutError, ValidationError
from flask_server import run_server
from player import PlaybackCommander
from playlist import list_playlists, render_playlists_table
from spot import Session, SpotifyClient

# --- Setup ---
colorama.init(autoreset=True)

logger = logging.getLogger("MainApp")


def setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spotify-shortcut",
        description="Start or pause a Spotify playlist on a Connect device.",
    )
    parser.add_argument("-playlist", "--playlist", default="", help="Playlist name, ID or URL to play")
    parser.add_argument("-device", "--device", default="", help="Device name or ID to play on")
    parser.add_argument("-shuffle", "--shuffle", action="store_true", help="Enable shuffle mode and start at a random track")
    parser.add_argument("-pause", "--pause", action="store_true", help="Pause playback")
    parser.add_argument("-devices", "--devices", action="store_true", help="List available Spotify Connect devices and exit")
    parser.add_argument("-playlists", "--playlists", action="store_true", help="List your Spotify playlists and exit")
    parser.add_argument("-server", "--server", action="store_true", help="Start as HTTP API server")
    parser.add_argument("-debug", "--debug", action="store_true", help="Print raw API responses for debugging")
    return parser


def print_debug_json(label: str, records: Iterable[Any]) -> None:
    print(f"\n=== Raw {label} Data ===")
    print(json.dumps([r.raw for r in records], indent=2))
    print("=== End Raw Data ===")


def connect(config: AppConfig) -> SpotifyClient:
    """Cached token first, browser login otherwise; retried once if Spotify rejects the token."""
    oauth = build_oauth(config)
    client = load_cached_client(oauth) or authenticate_interactive(oauth)

    try:
        user = client.current_user()
    except RemoteAPIError as e:
        logger.warning("Token may be expired, re-authenticating: %s", e)
        client = authenticate_interactive(oauth)
        user = client.current_user()

    print(f"{Fore.GREEN}Authenticated as: {user.display_name}{Style.RESET_ALL}")
    return client


def handle_playlists(client: SpotifyClient, args: argparse.Namespace, config: AppConfig) -> None:
    playlists = list_playlists(client)
    if args.debug:
        print_debug_json("Playlist", playlists)
    render_playlists_table(playlists)


def handle_pause(client: SpotifyClient, args: argparse.Namespace, config: AppConfig) -> None:
    print(PlaybackCommander(Session(client)).pause())


def handle_devices(client: SpotifyClient, args: argparse.Namespace, config: AppConfig) -> None:
    devices = client.devices()
    if not devices:
        raise NoDevicesError("No Spotify Connect devices found. Make sure a device is active.")
    if args.debug:
        print_debug_json("Device", devices)
    render_devices_table(devices)


def handle_play(client: SpotifyClient, args: argparse.Namespace, config: AppConfig) -> None:
    if args.debug:
        print_debug_json("Device", client.devices())
    commander = PlaybackCommander(Session(client), out=sys.stdout)
    message = commander.play(config.device, config.playlist, shuffle=args.shuffle)
    print(f"{Fore.GREEN}{message}{Style.RESET_ALL}")


def select_mode(args: argparse.Namespace) -> str:
    for mode in ("server", "playlists", "pause", "devices"):
        if getattr(args, mode):
            return mode
    return "play"


# --- Dispatcher Map ---
MODE_HANDLERS = {
    "playlists": handle_playlists,
    "pause": handle_pause,
    "devices": handle_devices,
    "play": handle_play,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)

    try:
        config = load_config().with_overrides(playlist=args.playlist, device=args.device)
        mode = select_mode(args)

        if mode == "server":
            run_server(config)
            return 0

        if mode == "play" and not config.playlist:
            raise ValidationError("SPOTIFY_PLAYLIST_ID is required. Use -playlist flag or set in .env")

        client = connect(config)
        MODE_HANDLERS[mode](client, args, config)
    except ShortcutError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"{Fore.RED}Error: {e}{Style.RESET_ALL}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print(f"\n{Fore.MAGENTA}Interrupted. Goodbye!")
        return 130
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
