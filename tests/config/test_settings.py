import pytest
from pydantic import ValidationError
from pydantic_settings import SettingsError

from internal.config import Settings, load_config
from internal.core.exception import ConfigurationError
from pkg.logger import LogFormat

_ENV_KEYS = (
    "APP_ENV",
    "TIKTOK_CLIENT_KEY",
    "TIKTOK_CLIENT_SECRET",
    "SERVER_PORT",
    "TIKTOK_SCOPES",
    "DEBUG",
    "BACKEND_CORS_ORIGINS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults(make_settings):
    settings = make_settings()

    assert settings.SERVER_PORT == 8080
    assert settings.TIKTOK_REDIRECT_URI == "http://localhost:8080/callback"
    assert settings.PROVIDER_TIMEOUT == 30
    assert settings.OAUTH_STATE_VERIFY is True
    assert settings.LOG_FORMAT == LogFormat.TEXT
    assert settings.log_level == "INFO"


def test_debug_forces_debug_level(make_settings):
    assert make_settings(DEBUG=True).log_level == "DEBUG"


@pytest.mark.parametrize(
    "overrides",
    [{"TIKTOK_CLIENT_KEY": ""}, {"TIKTOK_CLIENT_SECRET": "  "}, {"PROVIDER_TIMEOUT": 0}],
)
def test_invalid_values(make_settings, overrides):
    with pytest.raises(ValidationError):
        make_settings(**overrides)


def test_scopes_from_env(monkeypatch):
    monkeypatch.setenv("TIKTOK_CLIENT_KEY", "key")
    monkeypatch.setenv("TIKTOK_CLIENT_SECRET", "secret")
    monkeypatch.setenv("TIKTOK_SCOPES", "user.info.basic, video.list")

    settings = Settings(_env_file=None)  # type: ignore[call-arg]
    assert settings.TIKTOK_SCOPES == ["user.info.basic", "video.list"]
    assert settings.tiktok_config().scope == "user.info.basic,video.list"


@pytest.mark.parametrize(
    "raw",
    ["http://a.example, http://b.example", '["http://a.example", "http://b.example"]'],
)
def test_cors_origins_from_env(monkeypatch, raw):
    monkeypatch.setenv("TIKTOK_CLIENT_KEY", "key")
    monkeypatch.setenv("TIKTOK_CLIENT_SECRET", "secret")
    monkeypatch.setenv("BACKEND_CORS_ORIGINS", raw)

    settings = Settings(_env_file=None)  # type: ignore[call-arg]
    assert settings.BACKEND_CORS_ORIGINS == ["http://a.example", "http://b.example"]


def test_tiktok_config(make_settings):
    config = make_settings(PROVIDER_TIMEOUT=5).tiktok_config()

    assert config.client_key == "test_client_key"
    assert config.client_secret == "test_client_secret"
    assert config.timeout == 5


class TestLoadConfig:
    def test_missing_credentials(self, tmp_path):
        with pytest.raises(ConfigurationError, match="TIKTOK_CLIENT_KEY"):
            load_config(base_dir=tmp_path)

    def test_env_file_precedence(self, tmp_path, monkeypatch):
        (tmp_path / "configs").mkdir()
        (tmp_path / "configs" / ".env.dev").write_text(
            "TIKTOK_CLIENT_KEY=from_env_file\nTIKTOK_CLIENT_SECRET=s1\nSERVER_PORT=9000\n"
        )
        (tmp_path / ".env").write_text("APP_ENV=dev\nTIKTOK_CLIENT_SECRET=s2\n")
        monkeypatch.setenv("SERVER_PORT", "9100")

        settings = load_config(base_dir=tmp_path)

        assert settings.APP_ENV == "dev"
        assert settings.TIKTOK_CLIENT_KEY == "from_env_file"
        assert settings.TIKTOK_CLIENT_SECRET.get_secret_value() == "s2"
        assert settings.SERVER_PORT == 9100

    def test_plain_cors_origin_in_env_file(self, tmp_path):
        (tmp_path / ".env").write_text(
            "TIKTOK_CLIENT_KEY=key\nTIKTOK_CLIENT_SECRET=secret\nBACKEND_CORS_ORIGINS=https://app.example\n"
        )

        settings = load_config(base_dir=tmp_path)

        assert settings.BACKEND_CORS_ORIGINS == ["https://app.example"]

    def test_invalid_cors_json(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TIKTOK_CLIENT_KEY", "key")
        monkeypatch.setenv("TIKTOK_CLIENT_SECRET", "secret")
        monkeypatch.setenv("BACKEND_CORS_ORIGINS", "[not json")

        with pytest.raises(ConfigurationError, match="BACKEND_CORS_ORIGINS"):
            load_config(base_dir=tmp_path)

    def test_settings_source_error(self, tmp_path, monkeypatch):
        def _broken(**_kwargs):
            raise SettingsError('error parsing value for field "SOME_FIELD" from source "EnvSettingsSource"')

        monkeypatch.setattr("internal.config.loader.Settings", _broken)

        with pytest.raises(ConfigurationError, match="Config load failed: error parsing value"):
            load_config(base_dir=tmp_path)
