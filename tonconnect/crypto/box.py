# tonconnect/crypto/box.py
"""
NaCl box (X25519 + XSalsa20-Poly1305) used for every bridge message.
The bridge carries nonce || ciphertext; encrypt/decrypt take the nonce
separately and seal/open_payload handle the concatenated form.
"""
from typing import Optional

import nacl.utils
from nacl.exceptions import CryptoError as NaClError
from nacl.public import Box, PrivateKey, PublicKey

from tonconnect.common.errors import (
    AuthenticationFailure,
    EncryptionFailure,
    InvalidKeyLength,
    InvalidNonceLength,
    InvalidPeerKey,
    MalformedPayload,
)
from tonconnect.common.utils import hex_to_bytes

NONCE_LENGTH = Box.NONCE_SIZE  # 24
KEY_LENGTH = PublicKey.SIZE    # 32
MAC_LENGTH = 16


def _peer_key(peer_public_hex: str) -> PublicKey:
    try:
        raw = hex_to_bytes(peer_public_hex)
    except (TypeError, ValueError) as e:
        raise InvalidPeerKey("peer public key is not valid hex") from e
    if len(raw) != KEY_LENGTH:
        raise InvalidPeerKey(f"peer public key must be {KEY_LENGTH} bytes, got {len(raw)}")
    return PublicKey(raw)


def _own_key(own_secret: bytes) -> PrivateKey:
    if len(own_secret) != KEY_LENGTH:
        raise InvalidKeyLength(f"secret key must be {KEY_LENGTH} bytes")
    return PrivateKey(bytes(own_secret))


def _check_nonce(nonce: bytes) -> None:
    if len(nonce) != NONCE_LENGTH:
        raise InvalidNonceLength(f"nonce must be {NONCE_LENGTH} bytes, got {len(nonce)}")


def encrypt(own_secret: bytes, plaintext: bytes, nonce: bytes, peer_public_hex: str) -> bytes:
    """Returns the ciphertext (MAC included) without the nonce prefix."""
    peer = _peer_key(peer_public_hex)
    _check_nonce(nonce)
    own = _own_key(own_secret)
    try:
        sealed = Box(own, peer).encrypt(bytes(plaintext), bytes(nonce))
    except NaClError as e:
        raise EncryptionFailure("encryption failed") from e
    return sealed.ciphertext


def decrypt(own_secret: bytes, ciphertext: bytes, nonce: bytes, peer_public_hex: str) -> bytes:
    peer = _peer_key(peer_public_hex)
    _check_nonce(nonce)
    own = _own_key(own_secret)
    if len(ciphertext) < MAC_LENGTH:
        raise AuthenticationFailure()
    try:
        return Box(own, peer).decrypt(bytes(ciphertext), bytes(nonce))
    except NaClError:
        # same error for wrong key, tampering and degenerate peer keys
        raise AuthenticationFailure() from None


def seal(own_secret: bytes, plaintext: bytes, peer_public_hex: str, nonce: Optional[bytes] = None) -> bytes:
    if nonce is None:
        nonce = nacl.utils.random(NONCE_LENGTH)
    return bytes(nonce) + encrypt(own_secret, plaintext, nonce, peer_public_hex)


def open_payload(own_secret: bytes, payload: bytes, peer_public_hex: str) -> bytes:
    if len(payload) < NONCE_LENGTH:
        raise MalformedPayload(f"payload shorter than a {NONCE_LENGTH}-byte nonce")
    return decrypt(own_secret, payload[NONCE_LENGTH:], payload[:NONCE_LENGTH], peer_public_hex)
