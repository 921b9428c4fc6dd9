# tonconnect/bridge/transport.py
import logging
from contextlib import closing
from typing import Callable, Iterable, Iterator, Optional, Sequence, Union

import requests

from tonconnect.bridge.sse import Event, SSEParser
from tonconnect.common.errors import (
    BridgeConnectionError,
    MalformedPayload,
    MessageError,
    UnexpectedResponse,
    UnexpectedStreamEnd,
)
from tonconnect.common.protocol import BridgeMessage, Topic, decode_bridge_message
from tonconnect.common.utils import b64e
from tonconnect.link import build_listen_url, build_message_url

logger = logging.getLogger(__name__)

EVENT_STREAM = "text/event-stream"
DEFAULT_TTL = 300
DEFAULT_CONNECT_TIMEOUT = 10.0

Topics = Optional[Iterable[Union[Topic, str]]]


def media_type(content_type: Optional[str]) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def decode_event(event: Event) -> BridgeMessage:
    if event.malformed:
        raise MalformedPayload(f"frame {event.id} is not valid UTF-8")
    return decode_bridge_message(event.data)


class HttpBridge:
    """
    Listener for one bridge. Every call to events()/listen()/subscribe()
    opens one streaming GET and reads it until it fails; frames are handed
    out one at a time, in order, and the next line is read only after the
    consumer is done with the current one.

    Nothing reconnects automatically. `last_event_id` holds the id of the
    last delivered frame; calling again sends it as Last-Event-ID.
    """

    def __init__(
        self,
        bridge_url: str,
        session: Optional[requests.Session] = None,
        last_event_id: Optional[str] = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ):
        self.bridge_url = bridge_url
        self.session = session or requests.Session()
        self.last_event_id = last_event_id
        self.connect_timeout = connect_timeout

    def _headers(self) -> dict:
        headers = {"Accept": EVENT_STREAM}
        if self.last_event_id is not None:
            headers["Last-Event-ID"] = self.last_event_id
        return headers

    def _check_response(self, res) -> None:
        if not 200 <= res.status_code < 300:
            raise UnexpectedResponse(f"request failed with status: {res.status_code}", status=res.status_code)
        content_type = res.headers.get("Content-Type")
        if media_type(content_type) != EVENT_STREAM:
            raise UnexpectedResponse(
                f"expected content type {EVENT_STREAM}, got {content_type or 'none'}",
                status=res.status_code, content_type=content_type,
            )

    def events(self, client_ids: Sequence[str], topics: Topics = None) -> Iterator[Event]:
        """Raw SSE frames. Ends only by raising (or by the caller closing the generator)."""
        url = build_listen_url(self.bridge_url, client_ids, topics)
        logger.debug("listening on %s (last event id %s)", url, self.last_event_id)
        try:
            res = self.session.get(url, headers=self._headers(), stream=True, timeout=(self.connect_timeout, None))
        except requests.RequestException as e:
            raise BridgeConnectionError(f"cannot connect to bridge: {e}") from e

        with res:
            self._check_response(res)
            parser = SSEParser()
            try:
                for chunk in res.iter_content(chunk_size=None):
                    for event in parser.feed(chunk):
                        if event.id is not None:
                            self.last_event_id = event.id
                        yield event
            except requests.RequestException as e:
                raise BridgeConnectionError(f"bridge stream failed: {e}") from e
            try:
                parser.finish()
            except UnexpectedStreamEnd as e:
                e.last_event_id = self.last_event_id
                raise
            raise UnexpectedStreamEnd("bridge closed the stream", last_event_id=self.last_event_id)

    def listen(self, client_ids: Sequence[str], topics: Topics = None) -> Iterator[BridgeMessage]:
        """Bridge envelopes; frames without data are skipped. A bad envelope raises MalformedPayload."""
        with closing(self.events(client_ids, topics)) as events:
            for event in events:
                if not event.data and not event.malformed:
                    continue
                yield decode_event(event)

    def subscribe(
        self,
        client_ids: Sequence[str],
        handler: Callable[[BridgeMessage], None],
        topics: Topics = None,
        on_error: Optional[Callable[[MessageError, Event], None]] = None,
    ) -> None:
        """
        Calls `handler` for every envelope until the stream fails. With
        `on_error`, frames that do not decode are passed to it and the loop
        goes on; without it the decode error ends the loop.
        """
        with closing(self.events(client_ids, topics)) as events:
            for event in events:
                if not event.data and not event.malformed:
                    continue
                try:
                    message = decode_event(event)
                except MessageError as e:
                    if on_error is None:
                        raise
                    logger.warning("malformed bridge frame %s: %s", event.id, e)
                    on_error(e, event)
                    continue
                handler(message)

    def send(
        self,
        client_id: str,
        to: str,
        payload: bytes,
        ttl: int = DEFAULT_TTL,
        topic: Optional[Union[Topic, str]] = None,
    ) -> None:
        """POST an already encrypted payload (nonce || ciphertext) to `to`."""
        url = build_message_url(self.bridge_url, client_id, to, ttl, topic)
        try:
            res = self.session.post(url, data=b64e(payload), timeout=self.connect_timeout)
        except requests.RequestException as e:
            raise BridgeConnectionError(f"cannot send to bridge: {e}") from e
        with res:
            if not 200 <= res.status_code < 300:
                raise UnexpectedResponse(f"send failed with status: {res.status_code}", status=res.status_code)
        logger.debug("sent %d bytes to %s", len(payload), to)

    def close(self) -> None:
        self.session.close()
