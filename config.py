import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from errors import ConfigError
from spotify_config import DEFAULT_PORT, DEFAULT_REDIRECT_URI, DEFAULT_TOKEN_FILE

# --- Environment variable names ---
ENV_CLIENT_ID = "SPOTIFY_CLIENT_ID"
ENV_CLIENT_SECRET = "SPOTIFY_CLIENT_SECRET"
ENV_REDIRECT_URI = "SPOTIFY_REDIRECT_URI"
ENV_PLAYLIST_ID = "SPOTIFY_PLAYLIST_ID"
ENV_DEVICE_NAME = "SPOTIFY_DEVICE_NAME"
ENV_TOKEN_FILE = "SPOTIFY_TOKEN_FILE"
ENV_API_ACCESS_TOKEN = "API_ACCESS_TOKEN"
ENV_PORT = "PORT"


@dataclass
class AppConfig:
    client_id: str
    client_secret: str
    redirect_uri: str = DEFAULT_REDIRECT_URI
    playlist: str = ""
    device: str = ""
    token_file: str = DEFAULT_TOKEN_FILE
    api_access_token: str = ""
    port: int = DEFAULT_PORT

    def with_overrides(self, playlist: Optional[str] = None, device: Optional[str] = None) -> "AppConfig":
        """Flag values win over the environment defaults."""
        return AppConfig(
            client_id=self.client_id,
            client_secret=self.client_secret,
            redirect_uri=self.redirect_uri,
            playlist=playlist or self.playlist,
            device=device or self.device,
            token_file=self.token_file,
            api_access_token=self.api_access_token,
            port=self.port,
        )

    def require_api_token(self) -> str:
        if not self.api_access_token:
            raise ConfigError(f"{ENV_API_ACCESS_TOKEN} environment variable is required for server mode")
        return self.api_access_token


def load_config(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Builds the application config from `.env` and the process environment.
    Pass `environ` to read from an explicit mapping instead (no `.env` lookup).
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    client_id = environ.get(ENV_CLIENT_ID, "")
    client_secret = environ.get(ENV_CLIENT_SECRET, "")
    if not client_id or not client_secret:
        raise ConfigError(f"{ENV_CLIENT_ID} and {ENV_CLIENT_SECRET} environment variables are required")

    raw_port = environ.get(ENV_PORT) or str(DEFAULT_PORT)
    try:
        port = int(raw_port)
    except ValueError as e:
        raise ConfigError(f"{ENV_PORT} must be an integer, got {raw_port!r}") from e

    return AppConfig(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=environ.get(ENV_REDIRECT_URI) or DEFAULT_REDIRECT_URI,
        playlist=environ.get(ENV_PLAYLIST_ID, ""),
        device=environ.get(ENV_DEVICE_NAME, ""),
        token_file=environ.get(ENV_TOKEN_FILE) or DEFAULT_TOKEN_FILE,
        api_access_token=environ.get(ENV_API_ACCESS_TOKEN, ""),
        port=port,
    )
