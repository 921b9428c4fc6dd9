# tests/test_config.py
import pytest

from tonconnect.config import DEFAULT_BRIDGE_URL, DEFAULT_WALLET_URL, load_settings

VARS = [
    "TONCONNECT_WALLET_URL",
    "TONCONNECT_BRIDGE_URL",
    "TONCONNECT_MANIFEST_URL",
    "TONCONNECT_SESSION_SECRET",
    "TONCONNECT_CONNECT_TIMEOUT",
    "TONCONNECT_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # setenv first so the undo also removes whatever load_dotenv writes
    for name in VARS:
        monkeypatch.setenv(name, "unset")
        monkeypatch.delenv(name)


def test_defaults(tmp_path):
    settings = load_settings(str(tmp_path / "missing.env"))
    assert settings.wallet_url == DEFAULT_WALLET_URL
    assert settings.bridge_url == DEFAULT_BRIDGE_URL
    assert settings.session_secret is None
    assert settings.connect_timeout == 10.0
    assert settings.log_level == "INFO"


def test_reads_env_file(tmp_path, monkeypatch):
    env = tmp_path / ".env"
    env.write_text(
        "TONCONNECT_BRIDGE_URL=https://bridge.example/bridge\n"
        "TONCONNECT_SESSION_SECRET=" + "ab" * 32 + "\n"
        "TONCONNECT_CONNECT_TIMEOUT=2.5\n"
        "TONCONNECT_LOG_LEVEL=debug\n"
    )
    settings = load_settings(str(env))
    assert settings.bridge_url == "https://bridge.example/bridge"
    assert settings.session_secret == "ab" * 32
    assert settings.connect_timeout == 2.5
    assert settings.log_level == "DEBUG"


def test_environment_wins_over_file(tmp_path, monkeypatch):
    env = tmp_path / ".env"
    env.write_text("TONCONNECT_BRIDGE_URL=https://from-file/bridge\n")
    monkeypatch.setenv("TONCONNECT_BRIDGE_URL", "https://from-env/bridge")
    assert load_settings(str(env)).bridge_url == "https://from-env/bridge"


def test_bad_timeout(tmp_path, monkeypatch):
    monkeypatch.setenv("TONCONNECT_CONNECT_TIMEOUT", "soon")
    with pytest.raises(ValueError):
        load_settings(str(tmp_path / "missing.env"))
