# tonconnect/__init__.py
"""
tonconnect: dapp side of the TON Connect bridge protocol.
Session key pair, NaCl box codec, universal links and an SSE listener
for the untrusted bridge between dapp and wallet.
"""

from tonconnect.bridge.sse import Event, SSEParser
from tonconnect.bridge.transport import HttpBridge
from tonconnect.common.protocol import (
    BridgeMessage,
    ConnectErrorEvent,
    ConnectEvent,
    ConnectRequest,
    DisconnectEvent,
    Network,
    TonAddressItem,
    TonProofItem,
    Topic,
)
from tonconnect.crypto.keys import KeyPair
from tonconnect.link import build_connect_link, build_listen_url
from tonconnect.session import TonConnect

__version__ = "0.1.0"

__all__ = [
    "BridgeMessage",
    "ConnectErrorEvent",
    "ConnectEvent",
    "ConnectRequest",
    "DisconnectEvent",
    "Event",
    "HttpBridge",
    "KeyPair",
    "Network",
    "SSEParser",
    "TonAddressItem",
    "TonConnect",
    "TonProofItem",
    "Topic",
    "build_connect_link",
    "build_listen_url",
]
