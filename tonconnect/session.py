# tonconnect/session.py
import json
import logging
from contextlib import closing
from typing import Callable, Iterator, Optional, Union

from tonconnect.bridge.transport import DEFAULT_TTL, HttpBridge, Topics
from tonconnect.common.errors import CryptoError, MessageError, TonConnectError
from tonconnect.common.protocol import (
    BridgeMessage,
    ConnectEvent,
    ConnectRequest,
    DisconnectEvent,
    Topic,
    decode_wallet_event,
)
from tonconnect.crypto.keys import KeyPair
from tonconnect.link import build_connect_link

logger = logging.getLogger(__name__)


class TonConnect:
    """
    Dapp side of one TON Connect session: owns the key pair, builds the
    universal link and turns bridge envelopes into decrypted wallet events.
    """

    def __init__(
        self,
        universal_url: str,
        bridge_url: str,
        keypair: Optional[KeyPair] = None,
        bridge: Optional[HttpBridge] = None,
    ):
        self.universal_url = universal_url
        self.keypair = keypair or KeyPair.generate()
        self.bridge = bridge or HttpBridge(bridge_url)
        self.wallet_public_key: Optional[str] = None

    @property
    def client_id(self) -> str:
        return self.keypair.public_hex()

    def create_connect_link(self, request: ConnectRequest) -> str:
        return build_connect_link(self.universal_url, self.client_id, request)

    def decrypt_message(self, message: BridgeMessage):
        """BridgeMessage -> wallet event. Raises CryptoError or MessageError for this message only."""
        plaintext = self.keypair.open(message.payload(), message.from_)
        return decode_wallet_event(plaintext)

    def _track(self, message: BridgeMessage, event) -> None:
        if isinstance(event, ConnectEvent):
            self.wallet_public_key = message.from_
            logger.info("wallet %s connected (event %d)", message.from_, event.id)
        elif isinstance(event, DisconnectEvent):
            if self.wallet_public_key == message.from_:
                self.wallet_public_key = None
            logger.info("wallet %s disconnected (event %d)", message.from_, event.id)

    def listen(self, topics: Topics = None) -> Iterator:
        with closing(self.bridge.listen([self.client_id], topics)) as messages:
            for message in messages:
                event = self.decrypt_message(message)
                self._track(message, event)
                yield event

    def subscribe(
        self,
        handler: Callable,
        topics: Topics = None,
        on_error: Optional[Callable[[TonConnectError], None]] = None,
    ) -> None:
        """
        Runs until the stream fails. Messages that do not decrypt or decode
        go to `on_error` (when given) and the loop continues.
        """
        def dispatch(message: BridgeMessage):
            try:
                event = self.decrypt_message(message)
            except (CryptoError, MessageError) as e:
                if on_error is None:
                    raise
                logger.warning("dropping message from %s: %s", message.from_, e)
                on_error(e)
                return
            self._track(message, event)
            handler(event)

        bridge_error = None if on_error is None else (lambda e, _event: on_error(e))
        self.bridge.subscribe([self.client_id], dispatch, topics, on_error=bridge_error)

    def send_request(self, payload: dict, topic: Optional[Union[Topic, str]] = None, ttl: int = DEFAULT_TTL) -> None:
        if self.wallet_public_key is None:
            raise TonConnectError("no wallet connected")
        body = json.dumps(payload, separators=(",", ":")).encode()
        sealed = self.keypair.seal(body, self.wallet_public_key)
        self.bridge.send(self.client_id, self.wallet_public_key, sealed, ttl=ttl, topic=topic)
