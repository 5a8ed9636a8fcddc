# Tests for the cmsrelay CLI entry point (startup checks).
# Created: 2026-10-18

from unittest.mock import patch

import pytest

from cmsrelay.__main__ import build_parser, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run each test from an empty directory with a known environment."""
    monkeypatch.chdir(tmp_path)
    for var in ("ORIGIN", "NODE_ENV", "PORT", "HOST", "LOG_LEVEL", "PROVIDER", "SCOPE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("OAUTH_CLIENT_ID", "abc")
    monkeypatch.setenv("OAUTH_CLIENT_SECRET", "shh")
    with patch("cmsrelay.__main__.setup_logging"):
        yield


class TestStartupSafetyCheck:
    @patch("cmsrelay.server.run_server")
    def test_production_with_empty_origin_exits_before_listening(self, mock_run, monkeypatch):
        monkeypatch.setenv("NODE_ENV", "production")
        assert main([]) == 1
        mock_run.assert_not_called()

    @patch("cmsrelay.server.run_server")
    def test_production_with_wildcard_exits(self, mock_run, monkeypatch):
        monkeypatch.setenv("NODE_ENV", "production")
        monkeypatch.setenv("ORIGIN", "*")
        assert main([]) == 1
        mock_run.assert_not_called()

    @patch("cmsrelay.server.run_server")
    def test_development_with_empty_origin_still_serves(self, mock_run):
        assert main([]) == 0
        mock_run.assert_called_once()

    @patch("cmsrelay.server.run_server")
    def test_production_with_exact_origin_serves(self, mock_run, monkeypatch):
        monkeypatch.setenv("NODE_ENV", "production")
        monkeypatch.setenv("ORIGIN", "https://cms.example.com")
        assert main(["--port", "5000"]) == 0
        settings = mock_run.call_args.args[0]
        assert settings.allowed_origins == ("https://cms.example.com",)
        assert mock_run.call_args.kwargs["port"] == 5000

    @patch("cmsrelay.server.run_server")
    def test_malformed_origin_exits(self, mock_run, monkeypatch):
        monkeypatch.setenv("ORIGIN", "https://cms.example.com/admin")
        assert main([]) == 1
        mock_run.assert_not_called()


class TestCheckConfig:
    @patch("cmsrelay.server.run_server")
    def test_check_config_does_not_serve(self, mock_run, monkeypatch):
        monkeypatch.setenv("ORIGIN", "https://cms.example.com")
        assert main(["--check-config"]) == 0
        mock_run.assert_not_called()


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.host is None
    assert args.port is None
    assert args.dev is False
    assert args.check_config is False
