"""
NoteStore Backend - Configuration and CLI Tests
=================================================

What:  Tests for Settings loading/validation and the notestore command line.
How:   Environment is controlled with monkeypatch; uvicorn.run is patched so
       the CLI never starts a server.
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from notestore.cli import build_parser, main
from notestore.config import Settings
from notestore.main import create_app


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No NOTESTORE_* variables and no .env file in the working directory."""
    for key in ("HOST", "PORT", "STORAGE_ROOT", "LOG_LEVEL", "CORS_ORIGINS"):
        monkeypatch.delenv(f"NOTESTORE_{key}", raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestSettings:
    """Tests for Settings."""

    def test_required_fields(self, clean_env):
        """host, port and storage_root have no defaults."""
        with pytest.raises(ValidationError):
            Settings()

    def test_loads_from_environment(self, clean_env, tmp_path):
        clean_env.setenv("NOTESTORE_HOST", "0.0.0.0")
        clean_env.setenv("NOTESTORE_PORT", "8080")
        clean_env.setenv("NOTESTORE_STORAGE_ROOT", str(tmp_path))

        settings = Settings()

        assert settings.host == "0.0.0.0"
        assert settings.port == 8080
        assert settings.storage_root == str(tmp_path)

    def test_keyword_arguments_override_environment(self, clean_env, tmp_path):
        clean_env.setenv("NOTESTORE_PORT", "8080")
        settings = Settings(host="localhost", port=9000, storage_root=str(tmp_path))
        assert settings.port == 9000

    def test_defaults(self, clean_env, tmp_path):
        settings = Settings(host="localhost", port=3000, storage_root=str(tmp_path))
        assert settings.log_level == "INFO"
        assert settings.upload_form_path is None
        assert settings.rate_limit_enabled is False
        assert settings.cors_origins_list == ["*"]

    def test_log_level_normalized(self, clean_env, tmp_path):
        settings = Settings(host="h", port=3000, storage_root=str(tmp_path), log_level="debug")
        assert settings.log_level == "DEBUG"

    def test_invalid_log_level_rejected(self, clean_env, tmp_path):
        with pytest.raises(ValidationError, match="Invalid log_level"):
            Settings(host="h", port=3000, storage_root=str(tmp_path), log_level="LOUD")

    @pytest.mark.parametrize("port", [0, 70000])
    def test_port_range(self, clean_env, tmp_path, port):
        with pytest.raises(ValidationError):
            Settings(host="h", port=port, storage_root=str(tmp_path))

    def test_blank_storage_root_rejected(self, clean_env):
        with pytest.raises(ValidationError):
            Settings(host="h", port=3000, storage_root="   ")

    def test_cors_origins_list(self, clean_env, tmp_path):
        settings = Settings(
            host="h",
            port=3000,
            storage_root=str(tmp_path),
            cors_origins="http://a.example, http://b.example,",
        )
        assert settings.cors_origins_list == ["http://a.example", "http://b.example"]


class TestCreateApp:
    """Tests for the application factory."""

    def test_settings_kept_on_app_state(self, test_settings, temp_storage):
        app = create_app(test_settings)
        assert app.state.settings is test_settings
        assert app.state.note_store.storage_root == temp_storage.resolve()

    def test_factory_reads_environment(self, clean_env, tmp_path):
        """`uvicorn --factory notestore.main:create_app` path."""
        clean_env.setenv("NOTESTORE_HOST", "127.0.0.1")
        clean_env.setenv("NOTESTORE_PORT", "3001")
        clean_env.setenv("NOTESTORE_STORAGE_ROOT", str(tmp_path))

        app = create_app()

        assert app.state.settings.port == 3001
        assert app.state.note_store.storage_root == tmp_path.resolve()


class TestCli:
    """Tests for the notestore command line."""

    def test_parses_short_options(self):
        args = build_parser().parse_args(["-h", "127.0.0.1", "-p", "3000", "-c", "./cache"])
        assert args.host == "127.0.0.1"
        assert args.port == 3000
        assert args.cache == "./cache"

    def test_parses_long_options(self):
        args = build_parser().parse_args(
            ["--host", "0.0.0.0", "--port", "8000", "--cache", "/tmp/notes", "--log-level", "debug"]
        )
        assert args.host == "0.0.0.0"
        assert args.log_level == "debug"

    @pytest.mark.parametrize(
        "argv",
        [
            [],
            ["-h", "127.0.0.1", "-p", "3000"],
            ["-p", "3000", "-c", "./cache"],
            ["-h", "127.0.0.1", "-c", "./cache"],
            ["-h", "127.0.0.1", "-p", "not-a-port", "-c", "./cache"],
        ],
    )
    def test_missing_or_bad_options_exit(self, argv):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(argv)
        assert exc_info.value.code == 2

    def test_help_exits_cleanly(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--help"])
        assert exc_info.value.code == 0
        assert "--cache" in capsys.readouterr().out

    def test_main_runs_uvicorn(self, clean_env, tmp_path):
        with patch("notestore.cli.uvicorn.run") as mock_run:
            main(["-h", "127.0.0.1", "-p", "3000", "-c", str(tmp_path)])

        mock_run.assert_called_once()
        app = mock_run.call_args.args[0]
        assert app.state.settings.storage_root == str(tmp_path)
        assert mock_run.call_args.kwargs["host"] == "127.0.0.1"
        assert mock_run.call_args.kwargs["port"] == 3000
        assert mock_run.call_args.kwargs["log_level"] == "info"

    def test_main_rejects_invalid_port(self, clean_env, tmp_path):
        with patch("notestore.cli.uvicorn.run") as mock_run:
            with pytest.raises(SystemExit) as exc_info:
                main(["-h", "127.0.0.1", "-p", "0", "-c", str(tmp_path)])

        assert exc_info.value.code == 2
        mock_run.assert_not_called()
