import logging
import queue
import threading
import webbrowser
from typing import Optional
from urllib.parse import urlparse

import requests
from colorama import Fore, Style
from flask import Flask, request
from spotipy.cache_handler import CacheFileHandler
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError
from werkzeug.serving import make_server

from config import AppConfig
from errors import AuthMismatchError, AuthTimeoutError
from spot import SpotipyClient
from spotify_config import AUTH_CALLBACK_TIMEOUT, OAUTH_STATE, SPOTIPY_SCOPE

logger = logging.getLogger("Spotify_Auth")

AUTH_SUCCESS_MESSAGE = "Authentication successful! You can close this window."


def build_oauth(config: AppConfig) -> SpotifyOAuth:
    """
    SpotifyOAuth bound to the token file. spotipy rewrites the whole file on
    every successful authorization or refresh.
    """
    return SpotifyOAuth(
        client_id=config.client_id,
        client_secret=config.client_secret,
        redirect_uri=config.redirect_uri,
        state=OAUTH_STATE,
        scope=SPOTIPY_SCOPE,
        cache_handler=CacheFileHandler(cache_path=config.token_file),
        open_browser=False,
    )


def load_cached_client(oauth: SpotifyOAuth) -> Optional[SpotipyClient]:
    """Client for the cached token, refreshing it if needed. None when there is no usable token."""
    token_info = oauth.cache_handler.get_cached_token()
    if not token_info:
        logger.info("No cached Spotify token found.")
        return None

    try:
        token_info = oauth.validate_token(token_info)
    except (SpotifyOauthError, requests.exceptions.RequestException) as e:
        logger.warning("Cached Spotify token could not be refreshed: %s", e)
        return None

    if not token_info:
        return None
    return SpotipyClient.from_auth_manager(oauth)


def exchange_code(oauth: SpotifyOAuth, code: Optional[str], state: Optional[str], error: Optional[str] = None) -> SpotipyClient:
    """Completes the authorization-code flow and persists the token."""
    if state != OAUTH_STATE:
        raise AuthMismatchError("State mismatch")
    if error or not code:
        raise AuthMismatchError(f"Failed to get token: {error or 'no code received from Spotify'}")

    try:
        oauth.get_access_token(code, as_dict=False, check_cache=False)
    except (SpotifyOauthError, SpotifyException, requests.exceptions.RequestException) as e:
        raise AuthMismatchError(f"Failed to get token: {e}") from e

    logger.info("Spotify token obtained and cached.")
    return SpotipyClient.from_auth_manager(oauth)


def _callback_app(oauth: SpotifyOAuth, path: str, results: "queue.Queue") -> Flask:
    app = Flask(__name__)

    @app.route(path)
    def callback():
        try:
            client = exchange_code(
                oauth,
                request.args.get("code"),
                request.args.get("state"),
                request.args.get("error"),
            )
        except AuthMismatchError as e:
            results.put(e)
            return str(e), 403
        results.put(client)
        return AUTH_SUCCESS_MESSAGE

    return app


def authenticate_interactive(oauth: SpotifyOAuth, timeout: float = AUTH_CALLBACK_TIMEOUT) -> SpotipyClient:
    """
    Runs the browser login for the CLI. A throwaway local server listens on
    the redirect URI until Spotify calls back once, or `timeout` runs out.
    """
    redirect = urlparse(oauth.redirect_uri)
    host = redirect.hostname or "127.0.0.1"
    port = redirect.port or 80
    path = redirect.path or "/"

    results: "queue.Queue" = queue.Queue()
    server = make_server(host, port, _callback_app(oauth, path, results), threaded=True)
    thread = threading.Thread(target=server.serve_forever, name="spotify-auth-callback", daemon=True)
    thread.start()
    logger.debug("Callback listener started on %s:%s%s", host, port, path)

    try:
        auth_url = oauth.get_authorize_url()
        print(f"\n{Fore.YELLOW}>> [Spotify Auth] Please visit this URL to authenticate:")
        print(f"{Fore.CYAN}{Style.BRIGHT}{auth_url}{Style.RESET_ALL}")
        webbrowser.open(auth_url)

        try:
            outcome = results.get(timeout=timeout)
        except queue.Empty:
            raise AuthTimeoutError(f"no authorization callback received within {timeout:g} seconds") from None
    finally:
        server.shutdown()
        thread.join(timeout=5)

    if isinstance(outcome, Exception):
        raise outcome
    logger.info("Spotify authentication successful!")
    return outcome
