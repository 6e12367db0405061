"""
Packed AES-256-GCM payload decoding.

Wire layout (produced by the submission side, stored on IPFS):

    nonce (12 B) | auth tag (16 B) | ciphertext (remaining)

Key = SHA-256(passphrase).  No salt, no KDF iterations: the shared passphrase
is the only secret.  The plaintext is UTF-8 JSON.

cryptography's AESGCM expects ciphertext||tag, so the tag is moved to the end
before decrypting.
"""

import hashlib
import json
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from Passport_Retrieval.pr_shared import config
from Passport_Retrieval.pr_shared.errors import (
    AuthenticationFailureError,
    ConfigurationError,
    EncodingFailureError,
    MalformedPayloadError,
)
from Passport_Retrieval.pr_shared.types import PackedPayload


def derive_key(passphrase: str) -> bytes:
    if not passphrase:
        raise ConfigurationError("passphrase is empty")
    return hashlib.sha256(passphrase.encode("utf-8")).digest()


def unpack(packed: bytes) -> PackedPayload:
    """Split a packed buffer into nonce, tag and ciphertext."""
    if not isinstance(packed, (bytes, bytearray, memoryview)):
        raise MalformedPayloadError(0)

    packed = bytes(packed)
    if len(packed) < config.HEADER_SIZE:
        raise MalformedPayloadError(len(packed))

    return PackedPayload(
        nonce=packed[:config.NONCE_SIZE],
        tag=packed[config.NONCE_SIZE:config.HEADER_SIZE],
        ciphertext=packed[config.HEADER_SIZE:],
    )


def decrypt_packed(packed: bytes, passphrase: str) -> Any:
    """Decrypt a packed payload and parse the plaintext as JSON.

    Raises MalformedPayloadError, AuthenticationFailureError,
    EncodingFailureError or ConfigurationError.
    """
    key = derive_key(passphrase)
    payload = unpack(packed)

    try:
        plaintext = AESGCM(key).decrypt(payload.nonce, payload.ciphertext + payload.tag, None)
    except InvalidTag:
        raise AuthenticationFailureError()

    try:
        text = plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingFailureError(f"invalid UTF-8 at byte {e.start}")

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise EncodingFailureError(e.msg)


class PayloadCodec:
    """Decryptor bound to the process-wide shared passphrase."""

    def __init__(self, passphrase: str | None = None):
        self._passphrase = config.require_passphrase(passphrase)

    def decrypt(self, packed: bytes) -> Any:
        return decrypt_packed(packed, self._passphrase)
