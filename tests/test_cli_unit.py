"""
Unit tests — Command-line entry points and the confirmation gate.
"""

import json
from unittest.mock import patch

import pytest

from purger.cli import (
    EXIT_ABORTED,
    EXIT_ERROR,
    EXIT_OK,
    looks_like_bot_token,
    main,
    warn_if_user_token,
)
from purger.config import Settings


@pytest.fixture(autouse=True)
def no_dotenv():
    with patch("purger.cli.load_dotenv"):
        yield


@pytest.fixture
def env(monkeypatch):
    for name, value in {"DISCORD_TOKEN": "Bot abc", "AUTHOR_ID": "1", "GUILD_ID": "2"}.items():
        monkeypatch.setenv(name, value)
    return monkeypatch


class TestTokenGate:
    def test_bot_prefix(self):
        assert looks_like_bot_token("Bot abc")
        assert not looks_like_bot_token("mfa.abc")

    @patch("purger.cli.time.sleep")
    def test_user_token_warns_and_pauses(self, mock_sleep, capsys):
        warn_if_user_token(Settings(token="user-token", user_token_delay=3))
        assert "does not appear to be a Bot token" in capsys.readouterr().out
        mock_sleep.assert_called_once_with(3)

    @patch("purger.cli.time.sleep")
    def test_bot_token_no_pause(self, mock_sleep, capsys):
        warn_if_user_token(Settings(token="Bot abc", user_token_delay=3))
        assert capsys.readouterr().out == ""
        mock_sleep.assert_not_called()


class TestMain:
    def test_missing_config_exits_nonzero(self, monkeypatch, capsys):
        for name in ("DISCORD_TOKEN", "AUTHOR_ID", "GUILD_ID"):
            monkeypatch.delenv(name, raising=False)
        assert main(["collect", "--yes"]) == EXIT_ERROR
        assert "DISCORD_TOKEN" in capsys.readouterr().err

    @patch("purger.cli.BulkMutator")
    def test_malformed_input_before_any_request(self, mock_mutator, env, tmp_path):
        path = tmp_path / "records.json"
        path.write_text('{"not": "a list"}', encoding="utf-8")
        assert main(["delete", "--input", str(path), "--yes"]) == EXIT_ERROR
        mock_mutator.assert_not_called()

    @patch("purger.cli.BulkMutator")
    def test_empty_record_file_exits_cleanly(self, mock_mutator, env, tmp_path):
        path = tmp_path / "records.json"
        path.write_text("[]", encoding="utf-8")
        assert main(["delete", "--input", str(path), "--yes"]) == EXIT_OK
        mock_mutator.assert_not_called()

    @patch("purger.cli.Collector")
    def test_collect_writes_records(self, mock_collector, env, tmp_path):
        records = [{"id": "1", "channel_id": "9"}]
        mock_collector.return_value.collect.return_value = records
        mock_collector.return_value.known_total = 1
        mock_collector.return_value.stop_reason = "complete"
        out = tmp_path / "found.json"

        assert main(["collect", "--output", str(out), "--yes"]) == EXIT_OK
        assert json.loads(out.read_text(encoding="utf-8")) == records

    @patch("purger.delete.time.sleep")
    @patch("purger.requester.requests.request")
    def test_delete_abort_exit_code_and_report(self, mock_request, mock_sleep, env, tmp_path, fake_response):
        path = tmp_path / "records.json"
        path.write_text(json.dumps([{"id": "1", "channel_id": "9"}, {"id": "2", "channel_id": "9"}]), encoding="utf-8")
        mock_request.side_effect = [fake_response(401, text="Unauthorized")]
        report = tmp_path / "failures.csv"

        code = main(["delete", "--input", str(path), "--failure-report", str(report), "--yes"])

        assert code == EXIT_ABORTED
        assert mock_request.call_count == 1
        assert report.exists()
