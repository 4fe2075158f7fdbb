"""Tests for the farmassist CLI."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from farmassist.cli import app
from farmassist.errors import ProviderResponseError

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging():
    with patch("farmassist.logging_setup.get_logger"):
        yield


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ("GEMINI_API_KEY", "GEMINI_MODEL", "OLLAMA_MODEL", "NETLIFY", "NETLIFY_DEV", "AWS_LAMBDA_FUNCTION_NAME"):
        monkeypatch.delenv(key, raising=False)


class TestAsk:
    def test_prints_reply(self):
        with patch("farmassist.orchestrator.generate_reply", new=AsyncMock(return_value="Plant in November.")):
            result = runner.invoke(app, ["ask", "When to plant maize?", "--no-weather"])
        assert result.exit_code == 0
        assert "Plant in November." in result.output

    def test_context_file(self, tmp_path, raw_context):
        path = tmp_path / "farm.json"
        path.write_text(json.dumps(raw_context))
        mock = AsyncMock(return_value="ok.")
        with patch("farmassist.orchestrator.generate_reply", new=mock):
            result = runner.invoke(app, ["ask", "q", "--context", str(path), "--no-weather"])
        assert result.exit_code == 0
        assert mock.await_args.args[1].farm_count == 1

    def test_json_output(self):
        with patch("farmassist.orchestrator.generate_reply", new=AsyncMock(return_value="ok.")):
            result = runner.invoke(app, ["ask", "q", "--no-weather", "--json"])
        data = json.loads(result.output)
        assert data["reply"] == "ok."
        assert data["provider"]["provider"] == "ollama"

    def test_generation_error_exits_1(self):
        error = ProviderResponseError("API key not valid.", status_code=400)
        with patch("farmassist.orchestrator.generate_reply", new=AsyncMock(side_effect=error)):
            result = runner.invoke(app, ["ask", "q", "--no-weather"])
        assert result.exit_code == 1

    def test_blank_prompt(self):
        result = runner.invoke(app, ["ask", "   "])
        assert result.exit_code == 2

    def test_unreadable_context(self, tmp_path):
        result = runner.invoke(app, ["ask", "q", "--context", str(tmp_path / "missing.json")])
        assert result.exit_code == 2


class TestHealth:
    def test_health_json(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "k")
        result = runner.invoke(app, ["health"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["provider"] == "gemini"
        assert data["model"] == "gemini-2.5-flash"
        assert "k" not in data.values()
