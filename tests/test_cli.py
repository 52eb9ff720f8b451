import json

from typer.testing import CliRunner

import sharedmatch.__main__ as cli
from sharedmatch.config import Settings
from sharedmatch.errors import NotFoundError

runner = CliRunner()


class NoPlayersApi:
    def __init__(self, *args, **kwargs):
        pass

    def resolve_players(self, player_name, opponent_name):
        raise NotFoundError("One or both players not found")


def test_cli_without_api_key_exits_with_error(monkeypatch):
    monkeypatch.setattr(cli, "load_settings", lambda: Settings(api_key=None))
    monkeypatch.setattr(cli, "setup_logger", lambda *args: None)

    result = runner.invoke(cli.app, ["Player", "Opponent"])

    assert result.exit_code == 1
    assert "PUBG API key not configured" in result.output


def test_cli_prints_records_and_fails_on_error_record(monkeypatch):
    monkeypatch.setattr(cli, "load_settings", lambda: Settings(api_key="key"))
    monkeypatch.setattr(cli, "setup_logger", lambda *args: None)
    monkeypatch.setattr(cli, "PubgApiClient", NoPlayersApi)

    result = runner.invoke(cli.app, ["Player", "Ghost"])

    records = [json.loads(line) for line in result.stdout.splitlines() if line.startswith("{")]
    assert records == [
        {"progress": "Fetching player data..."},
        {"error": "One or both players not found"},
    ]
    assert result.exit_code == 1
