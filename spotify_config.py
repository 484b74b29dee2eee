# --- Spotify API Configuration ---
# Register the application on the Spotify Developer Dashboard
# (https://developer.spotify.com/dashboard/applications) to get a
# Client ID and Client Secret.
#
# IMPORTANT: The Redirect URI MUST EXACTLY match what is registered in the
# Spotify Developer Dashboard settings.
DEFAULT_REDIRECT_URI = "http://127.0.0.1:8080/callback"

# Scopes needed to read devices and playlists and to control playback.
SPOTIPY_SCOPE = (
    "user-read-playback-state "
    "user-modify-playback-state "
    "user-read-currently-playing "
    "playlist-read-private "
    "playlist-read-collaborative"
)

# Where the OAuth token is cached between runs.
DEFAULT_TOKEN_FILE = ".spotify_token.json"

# OAuth state sent with the authorize URL and checked on the callback.
OAUTH_STATE = "spotify-shortcut-state"

# --- HTTP API ---
DEFAULT_PORT = 8080

# --- Playlist resolution ---
PLAYLIST_LINK_MARKER = "spotify.com/playlist/"
PLAYLIST_PATH_SEGMENT = "/playlist/"
PLAYLIST_PAGE_SIZE = 50
PLAYLIST_ID_LENGTH = 22

# --- Playback ---
# Spotify rejects a shuffle toggle until the new playback session is live.
SHUFFLE_SETTLE_SECONDS = 0.5

# How long the CLI waits for the browser to hit the local callback.
AUTH_CALLBACK_TIMEOUT = 300
