import io
import logging
import random

import pytest

from errors import NoDevicesError, NotAuthenticatedError, RemoteAPIError, ValidationError
from models import Device
from player import PAUSED_MESSAGE, PlaybackCommander
from spot import Session

from conftest import FakeSpotifyClient


def _commander(client, **kwargs):
    sleeps = []
    commander = PlaybackCommander(Session(client), sleep=sleeps.append, **kwargs)
    return commander, sleeps


def test_play_starts_at_first_track(fake_client):
    commander, sleeps = _commander(fake_client)

    message = commander.play("", "37i9dQZF1DXcBWIGoYBM5M")

    assert message == 'Now playing "Test Playlist" on Living Room Speaker (starting at track 1)'
    assert fake_client.called("start_playback") == [
        ("start_playback", "device123", "spotify:playlist:37i9dQZF1DXcBWIGoYBM5M", 0),
    ]
    assert fake_client.called("shuffle") == []
    assert sleeps == []


def test_play_with_shuffle_sequence():
    client = FakeSpotifyClient(track_count=10)
    commander, sleeps = _commander(client, rng=random.Random(7))

    message = commander.play("Kitchen Speaker", "37i9dQZF1DXcBWIGoYBM5M", shuffle=True)

    (_, device_id, _, offset), = client.called("start_playback")
    assert device_id == "device456"
    assert 0 <= offset < 10
    assert f"starting at track {offset + 1} of 10" in message
    assert "shuffle enabled" in message
    assert sleeps == [0.5]
    assert client.called("shuffle") == [("shuffle", True, "device456")]
    assert [c[0] for c in client.calls][-2:] == ["start_playback", "shuffle"]


def test_shuffle_offset_always_in_range():
    client = FakeSpotifyClient(track_count=10)
    commander, _ = _commander(client, rng=random.Random(0))

    for _ in range(200):
        commander.play("", "37i9dQZF1DXcBWIGoYBM5M", shuffle=True)

    offsets = {c[3] for c in client.called("start_playback")}
    assert offsets <= set(range(10))
    assert len(offsets) > 1


def test_shuffle_failure_is_only_a_warning(caplog):
    client = FakeSpotifyClient(track_count=5)
    client.fail["shuffle"] = RemoteAPIError("failed to set shuffle: restricted")
    commander, _ = _commander(client)

    with caplog.at_level(logging.WARNING):
        message = commander.play("", "37i9dQZF1DXcBWIGoYBM5M", shuffle=True)

    assert message.startswith('Now playing "Test Playlist"')
    assert "Failed to enable shuffle" in caplog.text


def test_playback_failure_is_fatal():
    client = FakeSpotifyClient()
    client.fail["start_playback"] = RemoteAPIError("failed to start playback: no device")
    commander, _ = _commander(client)

    with pytest.raises(RemoteAPIError, match="failed to start playback"):
        commander.play("", "37i9dQZF1DXcBWIGoYBM5M", shuffle=True)
    assert client.called("shuffle") == []


def test_shuffle_on_empty_playlist_is_rejected():
    client = FakeSpotifyClient(track_count=0)
    commander, _ = _commander(client)

    with pytest.raises(ValidationError):
        commander.play("", "37i9dQZF1DXcBWIGoYBM5M", shuffle=True)
    assert client.called("start_playback") == []


def test_play_no_devices_before_resolution():
    client = FakeSpotifyClient(devices=[])
    commander, _ = _commander(client)

    with pytest.raises(NoDevicesError):
        commander.play("", "Test Playlist")
    assert client.called("current_user_playlists") == []
    assert client.called("playlist") == []


def test_play_not_authenticated():
    commander = PlaybackCommander(Session())
    with pytest.raises(NotAuthenticatedError):
        commander.play("", "Test Playlist")


def test_play_selects_named_device():
    client = FakeSpotifyClient(devices=[
        Device(id="device1", name="Device 1", is_active=False),
        Device(id="device2", name="Device 2", is_active=False),
        Device(id="device3", name="Target Speaker", is_active=False),
    ])
    commander, _ = _commander(client)

    commander.play("Target Speaker", "37i9dQZF1DXcBWIGoYBM5M")
    assert client.called("start_playback")[0][1] == "device3"


def test_play_resolves_name_through_library(fake_client):
    commander, _ = _commander(fake_client)

    commander.play("", "another playlist")
    assert fake_client.called("playlist") == [("playlist", "playlist456")]


def test_playlist_fetch_error_propagates(fake_client):
    fake_client.fail["playlist"] = RemoteAPIError("failed to get playlist: 404")
    commander, _ = _commander(fake_client)

    with pytest.raises(RemoteAPIError, match="failed to get playlist"):
        commander.play("", "37i9dQZF1DXcBWIGoYBM5M")
    assert fake_client.called("start_playback") == []


def test_narrated_play_reports_device_choice(fake_client):
    out = io.StringIO()
    commander = PlaybackCommander(Session(fake_client), out=out, sleep=lambda _: None)

    commander.play("Garage", "Test Playlist")

    text = out.getvalue()
    assert "Available devices:" in text
    assert "Device 'Garage' not found. Using device: Living Room Speaker" in text
    assert 'Found playlist: "Test Playlist" (ID: playlist123)' in text


def test_pause_success(fake_client):
    commander, _ = _commander(fake_client)
    assert commander.pause() == PAUSED_MESSAGE == "Playback paused"
    assert fake_client.called("pause") == [("pause",)]


def test_pause_error(fake_client):
    fake_client.fail["pause"] = RemoteAPIError("failed to pause playback: boom")
    commander, _ = _commander(fake_client)
    with pytest.raises(RemoteAPIError):
        commander.pause()


def test_pause_not_authenticated():
    commander = PlaybackCommander(Session())
    with pytest.raises(NotAuthenticatedError) as excinfo:
        commander.pause()
    assert str(excinfo.value) == "Spotify not authenticated. Visit /auth to authenticate"
