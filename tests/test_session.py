# tests/test_session.py
import json

import pytest

from conftest import CONNECT_EVENT, MANIFEST_URL, FakeResponse, FakeSession, bridge_frame
from tonconnect.bridge.transport import HttpBridge
from tonconnect.common.errors import (
    AuthenticationFailure,
    MalformedPayload,
    TonConnectError,
    UnexpectedStreamEnd,
    UnknownVariant,
)
from tonconnect.common.protocol import (
    BridgeMessage,
    ConnectErrorEvent,
    ConnectEvent,
    ConnectRequest,
    DisconnectEvent,
    TonAddressItem,
)
from tonconnect.common.utils import b64d, b64e
from tonconnect.crypto.keys import KeyPair
from tonconnect.session import TonConnect

WALLET_URL = "https://app.tonkeeper.com/ton-connect"
BRIDGE_URL = "https://bridge.tonapi.io/bridge"
PREAMBLE = b"\r\nbody: heartbeat\r\n\r\n"
DISCONNECT = {"event": "disconnect", "id": 66, "payload": {}}


def make_session(dapp, *chunks, extra=()):
    http = FakeSession(FakeResponse([PREAMBLE, *chunks]), *extra)
    return TonConnect(WALLET_URL, BRIDGE_URL, keypair=dapp, bridge=HttpBridge(BRIDGE_URL, session=http)), http


def test_connect_link_uses_session_key(dapp):
    tc = TonConnect(WALLET_URL, BRIDGE_URL, keypair=dapp)
    link = tc.create_connect_link(ConnectRequest(manifest_url=MANIFEST_URL, items=[TonAddressItem()]))
    assert link.startswith(f"{WALLET_URL}?v=2&id={dapp.public_hex()}&r=%7B")


def test_generates_keypair_when_missing():
    assert len(TonConnect(WALLET_URL, BRIDGE_URL).client_id) == 64


def test_decrypt_message(dapp, wallet):
    sealed = wallet.seal(json.dumps(CONNECT_EVENT).encode(), dapp.public_hex())
    tc = TonConnect(WALLET_URL, BRIDGE_URL, keypair=dapp)
    event = tc.decrypt_message(BridgeMessage(from_=wallet.public_hex(), message=b64e(sealed)))
    assert isinstance(event, ConnectEvent)
    assert event.id == 65


def test_decrypt_message_wrong_sender(dapp, wallet):
    sealed = wallet.seal(json.dumps(CONNECT_EVENT).encode(), dapp.public_hex())
    tc = TonConnect(WALLET_URL, BRIDGE_URL, keypair=dapp)
    with pytest.raises(AuthenticationFailure):
        tc.decrypt_message(BridgeMessage(from_=KeyPair.generate().public_hex(), message=b64e(sealed)))


def test_decrypt_message_bad_plaintext(dapp, wallet):
    tc = TonConnect(WALLET_URL, BRIDGE_URL, keypair=dapp)
    for plaintext, error in ((b"\xff\xfe", MalformedPayload), (b"{}", MalformedPayload),
                             (b'{"event":"nope","id":1}', UnknownVariant)):
        sealed = wallet.seal(plaintext, dapp.public_hex())
        with pytest.raises(error):
            tc.decrypt_message(BridgeMessage(from_=wallet.public_hex(), message=b64e(sealed)))


def test_listen_yields_events_and_tracks_wallet(dapp, wallet):
    tc, http = make_session(
        dapp,
        bridge_frame(wallet, dapp, CONNECT_EVENT, "1"),
        bridge_frame(wallet, dapp, DISCONNECT, "2"),
    )
    gen = tc.listen()
    first = next(gen)
    assert isinstance(first, ConnectEvent)
    assert tc.wallet_public_key == wallet.public_hex()
    second = next(gen)
    assert isinstance(second, DisconnectEvent)
    assert tc.wallet_public_key is None
    with pytest.raises(UnexpectedStreamEnd):
        next(gen)
    assert http.gets[0]["url"].endswith(f"/events?client_id={dapp.public_hex()}")


def test_subscribe_reports_bad_messages_and_continues(dapp, wallet):
    stranger = KeyPair.generate()
    tc, _ = make_session(
        dapp,
        bridge_frame(stranger, KeyPair.generate(), CONNECT_EVENT, "1"),   # not for us
        b"id: 2\r\ndata: garbage\r\n\r\n",
        bridge_frame(wallet, dapp, {"event": "connect_error", "id": 3,
                                    "payload": {"code": 300, "message": "User declined"}}, "3"),
    )
    events, errors = [], []
    with pytest.raises(UnexpectedStreamEnd):
        tc.subscribe(events.append, on_error=errors.append)
    assert [type(e) for e in events] == [ConnectErrorEvent]
    assert [type(e) for e in errors] == [AuthenticationFailure, MalformedPayload]
    assert tc.bridge.last_event_id == "3"


def test_subscribe_without_on_error_stops_at_bad_message(dapp, wallet):
    tc, _ = make_session(dapp, bridge_frame(KeyPair.generate(), KeyPair.generate(), CONNECT_EVENT, "1"),
                         bridge_frame(wallet, dapp, CONNECT_EVENT, "2"))
    seen = []
    with pytest.raises(AuthenticationFailure):
        tc.subscribe(seen.append)
    assert seen == []


def test_send_request_requires_connection(dapp):
    tc = TonConnect(WALLET_URL, BRIDGE_URL, keypair=dapp)
    with pytest.raises(TonConnectError):
        tc.send_request({"method": "disconnect", "params": [], "id": "1"})


def test_send_request_encrypts_to_wallet(dapp, wallet):
    tc, http = make_session(dapp, bridge_frame(wallet, dapp, CONNECT_EVENT, "1"),
                            extra=[FakeResponse(status_code=200, content_type="text/plain")])
    gen = tc.listen()
    next(gen)
    gen.close()

    request = {"method": "sendTransaction", "params": ["{}"], "id": "0"}
    tc.send_request(request, topic="sendTransaction", ttl=120)
    post = http.posts[0]
    assert post["url"] == (f"{BRIDGE_URL}/message?client_id={dapp.public_hex()}"
                           f"&to={wallet.public_hex()}&ttl=120&topic=sendTransaction")
    assert json.loads(wallet.open(b64d(post["data"]), dapp.public_hex())) == request


def test_later_connect_replaces_wallet(dapp, wallet):
    other = KeyPair.generate()
    tc, _ = make_session(
        dapp,
        bridge_frame(wallet, dapp, CONNECT_EVENT, "1"),
        bridge_frame(other, dapp, dict(CONNECT_EVENT, id=70), "2"),
        bridge_frame(wallet, dapp, DISCONNECT, "3"),
    )
    gen = tc.listen()
    next(gen)
    next(gen)
    assert tc.wallet_public_key == other.public_hex()
    next(gen)
    assert tc.wallet_public_key == other.public_hex()
    gen.close()


def test_bridge_built_from_url_when_omitted(dapp):
    tc = TonConnect(WALLET_URL, BRIDGE_URL, keypair=dapp)
    assert isinstance(tc.bridge, HttpBridge)
    assert tc.bridge.bridge_url == BRIDGE_URL
