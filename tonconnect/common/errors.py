from typing import Optional


class TonConnectError(Exception):
    """Base class for every error raised by tonconnect."""


class InvalidKeyLength(TonConnectError, ValueError):
    pass


class EmptyClientList(TonConnectError, ValueError):
    pass


# crypto

class CryptoError(TonConnectError):
    pass


class InvalidPeerKey(CryptoError):
    pass


class InvalidNonceLength(CryptoError):
    pass


class EncryptionFailure(CryptoError):
    pass


class AuthenticationFailure(CryptoError):
    """Ciphertext did not verify. Wrong key and tampering look the same."""

    def __init__(self, message: str = "decryption failed"):
        super().__init__(message)


# message decoding

class MessageError(TonConnectError):
    pass


class MalformedPayload(MessageError):
    pass


class UnknownVariant(MessageError):
    pass


class UnknownNetwork(MessageError):
    pass


# transport

class TransportError(TonConnectError):
    pass


class UnexpectedResponse(TransportError):
    def __init__(self, message: str, status: Optional[int] = None, content_type: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.content_type = content_type


class UnexpectedStreamEnd(TransportError):
    def __init__(self, message: str = "unexpected end of stream", last_event_id: Optional[str] = None):
        super().__init__(message)
        self.last_event_id = last_event_id


class BridgeConnectionError(TransportError):
    pass
