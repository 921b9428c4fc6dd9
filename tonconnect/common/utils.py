import base64, binascii
from typing import Union

from tonconnect.common.errors import MalformedPayload

_ALNUM = frozenset(b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789")

def b64e(b: bytes) -> str:
    return base64.b64encode(b).decode()

def b64d(s: Union[str, bytes]) -> bytes:
    if isinstance(s, str): s = s.encode()
    try:
        return base64.b64decode(s, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedPayload(f"invalid base64: {e}") from e

def hex_to_bytes(s: str) -> bytes:
    """Raises ValueError on odd length or non-hex characters."""
    return bytes.fromhex(s)

def quote_strict(s: str) -> str:
    """Percent-encode every UTF-8 byte that is not an ASCII letter or digit."""
    return "".join(chr(b) if b in _ALNUM else "%%%02X" % b for b in s.encode("utf-8"))
