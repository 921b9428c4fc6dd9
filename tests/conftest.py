# tests/conftest.py
import json

import pytest
from requests.structures import CaseInsensitiveDict

from tonconnect.common.utils import b64e
from tonconnect.crypto.keys import KeyPair

CLIENT_ID = "a3baaa66a1eee1dbe79058aca5980a2222fcc418508635f9317e9dc8c3108201"
MANIFEST_URL = "https://raw.githubusercontent.com/XaBbl4/pytonconnect/main/pytonconnect-manifest.json"

CONNECT_EVENT = {
    "id": 65,
    "event": "connect",
    "payload": {
        "items": [
            {
                "name": "ton_addr",
                "address": "0:dc69be3a989b1513f14e9e4ecc46ff6753770a2b199138708ff66238c2719e99",
                "network": "-239",
                "publicKey": "321b717a3a455096b6c3d20ad3f66207125557dacbb888fca9e00023aa89bfff",
                "walletStateInit": "te6cckECFgEAAwQAAgE0ARUBFP8A9KQT9LzyyAsCAgEgAxAC",
            }
        ],
        "device": {
            "platform": "iphone",
            "appName": "Tonkeeper",
            "appVersion": "3.0.304",
            "maxProtocolVersion": 2,
            "features": [{"name": "SendTransaction", "maxMessages": 4}],
        },
    },
}


@pytest.fixture
def dapp():
    return KeyPair.generate()


@pytest.fixture
def wallet():
    return KeyPair.generate()


def bridge_frame(sender: KeyPair, recipient: KeyPair, event: dict, event_id: str = "1") -> bytes:
    """One SSE frame carrying `event` encrypted from sender to recipient."""
    sealed = sender.seal(json.dumps(event).encode(), recipient.public_hex())
    data = json.dumps({"from": sender.public_hex(), "message": b64e(sealed)})
    return f"id: {event_id}\r\nevent: message\r\ndata: {data}\r\n\r\n".encode()


class FakeResponse:
    def __init__(self, chunks=(), status_code=200, content_type="text/event-stream", error=None):
        self.status_code = status_code
        self.headers = CaseInsensitiveDict()
        if content_type is not None:
            self.headers["Content-Type"] = content_type
        self._chunks = list(chunks)
        self._error = error
        self.closed = False

    def iter_content(self, chunk_size=None):
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.gets = []
        self.posts = []
        self.closed = False

    def get(self, url, headers=None, stream=False, timeout=None):
        self.gets.append({"url": url, "headers": dict(headers or {}), "stream": stream, "timeout": timeout})
        return self.responses.pop(0)

    def post(self, url, data=None, timeout=None):
        self.posts.append({"url": url, "data": data, "timeout": timeout})
        return self.responses.pop(0)

    def close(self):
        self.closed = True
