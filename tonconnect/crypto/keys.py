# tonconnect/crypto/keys.py
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey

from tonconnect.common.errors import InvalidKeyLength
from tonconnect.common.utils import hex_to_bytes
from tonconnect.crypto import box

KEY_LENGTH = 32


def _raw_secret(priv: X25519PrivateKey) -> bytes:
    return priv.private_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PrivateFormat.Raw,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _raw_public(priv: X25519PrivateKey) -> bytes:
    return priv.public_key().public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )


class KeyPair:
    """
    Per-session X25519 identity of the dapp.
    The public half goes into links and listen URLs; the secret half stays
    inside the object and is only exported through secret_hex().
    """

    __slots__ = ("_public", "_secret")

    def __init__(self, secret: bytes):
        if not isinstance(secret, (bytes, bytearray)) or len(secret) != KEY_LENGTH:
            raise InvalidKeyLength(f"secret key must be {KEY_LENGTH} bytes")
        priv = X25519PrivateKey.from_private_bytes(bytes(secret))
        object.__setattr__(self, "_secret", bytes(secret))
        object.__setattr__(self, "_public", _raw_public(priv))

    def __setattr__(self, name, value):
        raise AttributeError("KeyPair is immutable")

    @classmethod
    def generate(cls) -> "KeyPair":
        return cls(_raw_secret(X25519PrivateKey.generate()))

    @classmethod
    def from_secret(cls, secret: bytes) -> "KeyPair":
        return cls(secret)

    @classmethod
    def from_secret_hex(cls, secret_hex: str) -> "KeyPair":
        try:
            secret = hex_to_bytes(secret_hex)
        except ValueError as e:
            raise InvalidKeyLength(f"secret key is not valid hex: {e}") from e
        return cls(secret)

    @property
    def public_key(self) -> bytes:
        return self._public

    def public_hex(self) -> str:
        return self._public.hex()

    def secret_hex(self) -> str:
        return self._secret.hex()

    def encrypt(self, plaintext: bytes, nonce: bytes, peer_public_hex: str) -> bytes:
        return box.encrypt(self._secret, plaintext, nonce, peer_public_hex)

    def decrypt(self, ciphertext: bytes, nonce: bytes, peer_public_hex: str) -> bytes:
        return box.decrypt(self._secret, ciphertext, nonce, peer_public_hex)

    def seal(self, plaintext: bytes, peer_public_hex: str) -> bytes:
        return box.seal(self._secret, plaintext, peer_public_hex)

    def open(self, payload: bytes, peer_public_hex: str) -> bytes:
        return box.open_payload(self._secret, payload, peer_public_hex)

    def __eq__(self, other):
        return isinstance(other, KeyPair) and other._public == self._public

    def __hash__(self):
        return hash(self._public)

    def __repr__(self):
        return f"KeyPair(public={self.public_hex()})"

    def __reduce__(self):
        raise TypeError("KeyPair cannot be pickled")
