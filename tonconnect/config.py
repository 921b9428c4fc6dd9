import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_WALLET_URL = "https://app.tonkeeper.com/ton-connect"
DEFAULT_BRIDGE_URL = "https://bridge.tonapi.io/bridge"
DEFAULT_MANIFEST_URL = "https://raw.githubusercontent.com/XaBbl4/pytonconnect/main/pytonconnect-manifest.json"

ENV_FILE = os.path.join(os.path.dirname(__file__), "..", ".env")


@dataclass(frozen=True)
class Settings:
    wallet_url: str = DEFAULT_WALLET_URL
    bridge_url: str = DEFAULT_BRIDGE_URL
    manifest_url: str = DEFAULT_MANIFEST_URL
    session_secret: Optional[str] = None
    connect_timeout: float = 10.0
    log_level: str = "INFO"


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Read TONCONNECT_* variables; values already in the environment win over the .env file."""
    load_dotenv(env_file or ENV_FILE)
    return Settings(
        wallet_url=os.getenv("TONCONNECT_WALLET_URL", DEFAULT_WALLET_URL),
        bridge_url=os.getenv("TONCONNECT_BRIDGE_URL", DEFAULT_BRIDGE_URL),
        manifest_url=os.getenv("TONCONNECT_MANIFEST_URL", DEFAULT_MANIFEST_URL),
        session_secret=os.getenv("TONCONNECT_SESSION_SECRET") or None,
        connect_timeout=float(os.getenv("TONCONNECT_CONNECT_TIMEOUT", "10")),
        log_level=os.getenv("TONCONNECT_LOG_LEVEL", "INFO").upper(),
    )
