"""
tests/unit/test_settings.py — Unit tests for config/settings.py.

These tests validate the Pydantic Settings schema with no network access.

Run: pytest tests/unit/test_settings.py -v
"""

import pytest
from pydantic import ValidationError

# conftest.py adds project root to sys.path
from config.settings import Settings, load_settings

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_defaults(self):
        s = Settings()
        assert s.URI == "http://localhost:11015"
        assert s.NAMESPACE == "default"
        assert s.TIMEOUT == 30
        assert s.TOKEN is None
        assert s.INSECURE is False
        assert s.VERBOSE is False
        assert s.FLOWS == ""

    def test_settings_ignores_os_environ(self, monkeypatch):
        monkeypatch.setenv("CHECK_CDAP_URI", "http://elsewhere:1")
        assert Settings().URI == "http://localhost:11015"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_uri_trailing_slash_removed(self):
        s = Settings(URI="https://cdap.example.com:10443/")
        assert s.URI == "https://cdap.example.com:10443"

    def test_uri_whitespace_stripped(self):
        assert Settings(URI="  http://cdap:11015  ").URI == "http://cdap:11015"

    @pytest.mark.parametrize("uri", ["", "cdap:11015", "ftp://cdap", "http://"])
    def test_invalid_uri_rejected(self, uri):
        with pytest.raises(ValidationError, match="URI"):
            Settings(URI=uri)

    def test_empty_namespace_rejected(self):
        with pytest.raises(ValidationError, match="NAMESPACE"):
            Settings(NAMESPACE="   ")

    def test_timeout_parsed_from_string(self):
        assert Settings(TIMEOUT="5").TIMEOUT == 5

    @pytest.mark.parametrize("timeout", ["0", "-3", "soon"])
    def test_invalid_timeout_rejected(self, timeout):
        with pytest.raises(ValidationError, match="TIMEOUT"):
            Settings(TIMEOUT=timeout)

    def test_blank_token_is_none(self):
        assert Settings(TOKEN="  ").TOKEN is None

    def test_insecure_parsed_from_string(self):
        assert Settings(INSECURE="true").INSECURE is True


# ---------------------------------------------------------------------------
# load_settings precedence
# ---------------------------------------------------------------------------


class TestLoadSettings:
    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("CHECK_CDAP_URI", "http://router:11015")
        monkeypatch.setenv("CHECK_CDAP_FLOWS", "App.Flow")
        monkeypatch.setenv("URI", "http://ignored:1")
        s = load_settings()
        assert s.URI == "http://router:11015"
        assert s.FLOWS == "App.Flow"

    def test_overrides_beat_environment(self, monkeypatch):
        monkeypatch.setenv("CHECK_CDAP_NAMESPACE", "from_env")
        s = load_settings(overrides={"NAMESPACE": "from_cli", "TIMEOUT": None})
        assert s.NAMESPACE == "from_cli"
        assert s.TIMEOUT == 30

    def test_env_file_below_environment(self, tmp_path, monkeypatch):
        env_file = tmp_path / "cdap.env"
        env_file.write_text(
            "# check_cdap config\n"
            "CHECK_CDAP_URI=http://file:11015   # router\n"
            "export CHECK_CDAP_TOKEN='secret-token'\n"
            "CHECK_CDAP_NAMESPACE=file_ns\n"
            "\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("CHECK_CDAP_NAMESPACE", "env_ns")
        s = load_settings(str(env_file))
        assert s.URI == "http://file:11015"
        assert s.TOKEN == "secret-token"
        assert s.NAMESPACE == "env_ns"

    def test_missing_env_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            load_settings(str(tmp_path / "missing.env"))

    @pytest.mark.parametrize("name", ["TIMEOUT", "INSECURE", "VERBOSE", "URI", "NAMESPACE"])
    def test_empty_environment_value_uses_default(self, monkeypatch, name):
        monkeypatch.setenv(f"CHECK_CDAP_{name}", "")
        assert getattr(load_settings(), name) == getattr(Settings(), name)

    def test_empty_environment_value_keeps_env_file_value(self, tmp_path, monkeypatch):
        env_file = tmp_path / "cdap.env"
        env_file.write_text("CHECK_CDAP_TIMEOUT=5\n", encoding="utf-8")
        monkeypatch.setenv("CHECK_CDAP_TIMEOUT", "  ")
        assert load_settings(str(env_file)).TIMEOUT == 5
