"""
Wire model of the TON Connect protocol (v2).

Python attribute names are snake_case, wire names camelCase through aliases.
Unknown incoming fields are ignored. Decoding goes through the decode_*
helpers, which turn pydantic validation errors into tonconnect errors.
"""
import json
from enum import Enum
from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, PlainValidator, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from tonconnect.common.errors import MalformedPayload, UnknownNetwork, UnknownVariant
from tonconnect.common.utils import b64d

# ids and error codes are unsigned 32-bit on the wire
U32_MAX = 2**32 - 1


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class Topic(str, Enum):
    SEND_TRANSACTION = "sendTransaction"
    SIGN_DATA = "signData"


class Network(str, Enum):
    MAINNET = "-239"
    TESTNET = "-3"


class Platform(str, Enum):
    IPHONE = "iphone"
    IPAD = "ipad"
    ANDROID = "android"
    WINDOWS = "windows"
    MAC = "mac"
    LINUX = "linux"
    BROWSER = "browser"


# connect request (dapp -> wallet)

class TonAddressItem(WireModel):
    name: Literal["ton_addr"] = "ton_addr"

class TonProofItem(WireModel):
    name: Literal["ton_proof"] = "ton_proof"
    payload: str

ConnectItem = Annotated[Union[TonAddressItem, TonProofItem], Field(discriminator="name")]

class ConnectRequest(WireModel):
    manifest_url: str = Field(alias="manifestUrl")
    items: List[ConnectItem]


# bridge envelope

class BridgeMessage(WireModel):
    from_: str = Field(alias="from")
    message: str

    def payload(self) -> bytes:
        """nonce || ciphertext, base64-decoded."""
        return b64d(self.message)


# features: legacy bare string or tagged object

class LegacySendTransactionFeature(WireModel):
    name: Literal["SendTransaction"] = "SendTransaction"

class SendTransactionFeature(WireModel):
    name: Literal["SendTransaction"] = "SendTransaction"
    max_messages: int = Field(alias="maxMessages", ge=0, le=U32_MAX)

class SignDataFeature(WireModel):
    name: Literal["SignData"] = "SignData"

_OBJECT_FEATURES = {
    "SendTransaction": SendTransactionFeature,
    "SignData": SignDataFeature,
}


def _parse_feature(value: Any):
    if isinstance(value, (LegacySendTransactionFeature, SendTransactionFeature, SignDataFeature)):
        return value
    if isinstance(value, str):
        if value == "SendTransaction":
            return LegacySendTransactionFeature()
    elif isinstance(value, dict):
        model = _OBJECT_FEATURES.get(value.get("name"))
        if model is not None:
            return model.model_validate(value)
    raise PydanticCustomError("unknown_variant", "unknown feature: {value}", {"value": repr(value)})


def _dump_feature(feature) -> Any:
    if isinstance(feature, LegacySendTransactionFeature):
        return feature.name
    return feature.model_dump(by_alias=True, mode="json")


Feature = Annotated[
    Union[LegacySendTransactionFeature, SendTransactionFeature, SignDataFeature],
    PlainValidator(_parse_feature),
    PlainSerializer(_dump_feature),
]


class DeviceInfo(WireModel):
    platform: Platform
    app_name: str = Field(alias="appName")
    app_version: str = Field(alias="appVersion")
    max_protocol_version: int = Field(alias="maxProtocolVersion", ge=0)
    features: List[Feature] = Field(default_factory=list)


# connect replies (wallet -> dapp)

class TonProofDomain(WireModel):
    length_bytes: int = Field(alias="lengthBytes", ge=0)
    value: str

class TonProof(WireModel):
    timestamp: int
    domain: TonProofDomain
    signature: str
    payload: str

    @field_validator("timestamp", mode="before")
    @classmethod
    def _timestamp_from_string(cls, v):
        # wallets send either a JSON number or a numeric string
        if isinstance(v, str):
            try:
                return int(v)
            except ValueError:
                raise ValueError(f"timestamp is not an integer: {v!r}")
        return v

class TonAddressItemReply(WireModel):
    name: Literal["ton_addr"] = "ton_addr"
    address: str
    network: Network
    public_key: str = Field(alias="publicKey")
    wallet_state_init: str = Field(alias="walletStateInit")

class TonProofItemReply(WireModel):
    name: Literal["ton_proof"] = "ton_proof"
    proof: TonProof

ConnectItemReply = Annotated[Union[TonAddressItemReply, TonProofItemReply], Field(discriminator="name")]


class ConnectEventPayload(WireModel):
    items: List[ConnectItemReply]
    device: DeviceInfo

class ConnectErrorPayload(WireModel):
    code: int = Field(ge=0, le=U32_MAX)
    message: str


class ConnectEvent(WireModel):
    event: Literal["connect"] = "connect"
    id: int = Field(ge=0, le=U32_MAX)
    payload: ConnectEventPayload

class ConnectErrorEvent(WireModel):
    event: Literal["connect_error"] = "connect_error"
    id: int = Field(ge=0, le=U32_MAX)
    payload: ConnectErrorPayload

class DisconnectEvent(WireModel):
    event: Literal["disconnect"] = "disconnect"
    id: int = Field(ge=0, le=U32_MAX)

WalletEvent = Annotated[Union[ConnectEvent, ConnectErrorEvent, DisconnectEvent], Field(discriminator="event")]


class _WalletEventDocument(WireModel):
    event: WalletEvent

class _FeatureDocument(WireModel):
    feature: Feature


# encode / decode

def encode(model: WireModel) -> dict:
    return model.model_dump(by_alias=True, exclude_none=True, mode="json")

def to_json(model: WireModel) -> str:
    """Compact JSON with wire names, fields in declaration order."""
    return model.model_dump_json(by_alias=True, exclude_none=True)


def _translate(exc: ValidationError, what: str) -> Exception:
    for err in exc.errors():
        loc = err.get("loc", ())
        if err["type"] == "enum" and loc and loc[-1] == "network":
            return UnknownNetwork(f"unknown network: {err.get('input')!r}")
    for err in exc.errors():
        if err["type"] in ("union_tag_invalid", "unknown_variant"):
            return UnknownVariant(f"{what}: {err['msg']}")
    return MalformedPayload(f"invalid {what}: {exc.error_count()} error(s), first: {exc.errors()[0]['msg']}")


def _load_json(raw: Union[str, bytes], what: str) -> Any:
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedPayload(f"{what} is not valid UTF-8") from e
    try:
        return json.loads(raw)
    except ValueError as e:
        raise MalformedPayload(f"{what} is not valid JSON: {e}") from e


def _validate(model, data: Any, what: str):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise _translate(e, what) from e


def decode_wallet_event(raw: Union[str, bytes]):
    """Decrypted plaintext -> ConnectEvent | ConnectErrorEvent | DisconnectEvent."""
    data = _load_json(raw, "wallet event")
    return _validate(_WalletEventDocument, {"event": data}, "wallet event").event

def decode_bridge_message(raw: Union[str, bytes]) -> BridgeMessage:
    return _validate(BridgeMessage, _load_json(raw, "bridge message"), "bridge message")

def decode_device_info(raw: Union[str, bytes]) -> DeviceInfo:
    return _validate(DeviceInfo, _load_json(raw, "device info"), "device info")

def decode_connect_request(raw: Union[str, bytes]) -> ConnectRequest:
    return _validate(ConnectRequest, _load_json(raw, "connect request"), "connect request")

def decode_feature(value: Any):
    """Accepts an already-parsed JSON value (string or object)."""
    return _validate(_FeatureDocument, {"feature": value}, "feature").feature

def encode_feature(feature) -> Any:
    return _dump_feature(feature)
