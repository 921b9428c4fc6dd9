# tonconnect/link.py
from typing import Iterable, Optional, Sequence, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from tonconnect.common.errors import EmptyClientList
from tonconnect.common.protocol import ConnectRequest, Topic, to_json
from tonconnect.common.utils import quote_strict

PROTOCOL_VERSION = 2


def build_connect_link(wallet_universal_url: str, public_key_hex: str, connect_request: ConnectRequest) -> str:
    """
    Universal link handing `connect_request` to a wallet:
    <wallet_universal_url>?v=2&id=<public_key_hex>&r=<percent-encoded JSON>
    """
    request_json = to_json(connect_request)
    return f"{wallet_universal_url}?v={PROTOCOL_VERSION}&id={public_key_hex}&r={quote_strict(request_json)}"


def _topic_names(topics: Iterable[Union[Topic, str]]) -> str:
    return ",".join(Topic(t).value for t in topics)


def _with_path_and_query(base_url: str, segment: str, params: list) -> str:
    scheme, netloc, path, query, _ = urlsplit(base_url)
    path = path.rstrip("/") + "/" + segment
    pairs = parse_qsl(query, keep_blank_values=True) + params
    return urlunsplit((scheme, netloc, path, urlencode(pairs, safe=","), ""))


def build_listen_url(
    bridge_base_url: str,
    client_ids: Sequence[str],
    topics: Optional[Iterable[Union[Topic, str]]] = None,
) -> str:
    """<bridge_base_url>/events?client_id=<id>[,<id>...][&topic=<topic>[,<topic>...]]"""
    if not client_ids:
        raise EmptyClientList("client_ids is empty")
    params = [("client_id", ",".join(client_ids))]
    if topics is not None:
        params.append(("topic", _topic_names(topics)))
    return _with_path_and_query(bridge_base_url, "events", params)


def build_message_url(
    bridge_base_url: str,
    client_id: str,
    to: str,
    ttl: int,
    topic: Optional[Union[Topic, str]] = None,
) -> str:
    """<bridge_base_url>/message?client_id=<own id>&to=<wallet id>&ttl=<seconds>[&topic=<topic>]"""
    params = [("client_id", client_id), ("to", to), ("ttl", str(ttl))]
    if topic is not None:
        params.append(("topic", Topic(topic).value))
    return _with_path_and_query(bridge_base_url, "message", params)
