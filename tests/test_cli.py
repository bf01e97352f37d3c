"""
Tests for the Typer command line front end.
"""

import pytest
from typer.testing import CliRunner

from ym_bot import __version__
from ym_bot.cli import app as cli_app
from ym_bot.exceptions import NotFoundError
from ym_bot.models.track import Track
from tests.conftest import AUDIO_BYTES

TRACK = Track(id="42", title="Song", artists=("Artist",), duration_seconds=185)

runner = CliRunner()


class FakeClient:
    """Stands in for YandexMusicClient inside the CLI."""

    instances: list["FakeClient"] = []

    def __init__(self, token="", timeout=20.0, **kwargs):
        self.token = token
        self.timeout = timeout
        self.closed = False
        self.search_calls = []
        FakeClient.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True

    async def search_tracks(self, query, limit=10, offset=0):
        self.search_calls.append((query, limit, offset))
        return [TRACK]

    async def get_track(self, track_id):
        if track_id != "42":
            raise NotFoundError(f"track {track_id!r} not found")
        return TRACK

    async def get_download_url(self, track_id):
        return "https://cdn/42.mp3"

    async def download_to_file(self, download_url, dest_path):
        dest_path.write_bytes(AUDIO_BYTES)


@pytest.fixture(autouse=True)
def isolated_cli(tmp_path, monkeypatch):
    FakeClient.instances = []
    monkeypatch.setattr(cli_app, "CONFIG_FILE", tmp_path / "config" / "config.ini")
    monkeypatch.setattr(cli_app, "YandexMusicClient", FakeClient)
    monkeypatch.setenv("YANDEX_TOKEN", "env-token")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("YM_BOT_REQUEST_TIMEOUT", raising=False)
    monkeypatch.chdir(tmp_path)


def test_version():
    result = runner.invoke(cli_app.app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_search_prints_table():
    result = runner.invoke(cli_app.app, ["search", "we", "will", "rock", "--limit", "5"])

    assert result.exit_code == 0, result.output
    assert "Song" in result.output
    client = FakeClient.instances[-1]
    assert client.search_calls == [("we will rock", 5, 0)]
    assert client.token == "env-token"
    assert client.closed


def test_search_uses_configured_limit():
    cli_app.ConfigManager(cli_app.CONFIG_FILE).save_new_config({"search_limit": 3})

    result = runner.invoke(cli_app.app, ["search", "queen", "--offset", "6"])

    assert result.exit_code == 0, result.output
    assert FakeClient.instances[-1].search_calls == [("queen", 3, 6)]


def test_stream_prints_url():
    result = runner.invoke(cli_app.app, ["stream", "42"])

    assert result.exit_code == 0, result.output
    assert "https://cdn/42.mp3" in result.output


def test_stream_error_exits_with_code_1():
    result = runner.invoke(cli_app.app, ["stream", "404"])

    assert result.exit_code == 1
    assert "NotFoundError" in result.output


def test_download_moves_file_and_cleans_temp(tmp_path, monkeypatch):
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    monkeypatch.setenv("TMPDIR", str(temp_root))
    monkeypatch.setattr("tempfile.tempdir", None)
    out_dir = tmp_path / "music"

    result = runner.invoke(cli_app.app, ["download", "42", "--output", str(out_dir)])

    assert result.exit_code == 0, result.output
    assert (out_dir / "Artist - Song.mp3").read_bytes() == AUDIO_BYTES
    assert list(temp_root.iterdir()) == []


def test_init_writes_token():
    result = runner.invoke(cli_app.app, ["init", "new-token"])

    assert result.exit_code == 0, result.output
    assert "token = new-token" in cli_app.CONFIG_FILE.read_text(encoding="utf-8")


def test_init_refuses_to_overwrite_without_confirmation():
    cli_app.ConfigManager(cli_app.CONFIG_FILE).save_new_config({"token": "old"})

    result = runner.invoke(cli_app.app, ["init", "new-token"], input="n\n")

    assert result.exit_code != 0
    assert "token = old" in cli_app.CONFIG_FILE.read_text(encoding="utf-8")


def test_invalid_config_exits_with_code_1(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")

    result = runner.invoke(cli_app.app, ["stream", "42"])

    assert result.exit_code == 1
    assert "ConfigurationError" in result.output
