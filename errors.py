"""Exceptions raised by the shortcut's playback, auth and config layers."""


class ShortcutError(Exception):
    """Base class for every failure the CLI or the HTTP API reports."""


class ConfigError(ShortcutError):
    """Required configuration is missing or malformed."""


class NotAuthenticatedError(ShortcutError):
    def __init__(self, message="Spotify not authenticated. Visit /auth to authenticate"):
        super().__init__(message)


class RemoteAPIError(ShortcutError):
    """A call to the Spotify Web API failed."""


class PlaylistResolutionError(RemoteAPIError):
    """Paging through the user's playlists failed while resolving a name."""


class NoDevicesError(ShortcutError):
    def __init__(self, message="no Spotify Connect devices found"):
        super().__init__(message)


class ValidationError(ShortcutError):
    """A required request parameter or flag is missing or unusable."""


class AuthMismatchError(ShortcutError):
    """OAuth state mismatch or a failed code exchange."""


class AuthTimeoutError(ShortcutError):
    """The browser never came back to the local callback listener."""
