"""AES-256-GCM encryption for secrets stored in channel configuration.

Encrypted values are self-describing strings::

    enc:<base64 nonce>:<base64 tag>:<base64 ciphertext>

Values without the ``enc:`` prefix are treated as legacy plaintext and pass
through ``decrypt`` unchanged.
"""

import base64
import binascii
import hashlib
import os
import re
from urllib.parse import parse_qsl, urlsplit

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

ENCRYPTED_PREFIX = "enc:"
NONCE_LENGTH = 12
TAG_LENGTH = 16
MIN_MASTER_KEY_LENGTH = 16

_SENSITIVE_QUERY_KEY = re.compile(r"token|key|secret|password|auth|api", re.IGNORECASE)


class CryptoError(Exception):
    """Base class for secret encryption errors."""


class InvalidMasterKeyError(CryptoError):
    """Master key is missing or too short."""


class DecryptionError(CryptoError):
    """Encrypted value is malformed or fails authentication."""


def derive_key(master_key: str) -> bytes:
    """Derive the 256-bit AES key from the master key.

    Raises:
        InvalidMasterKeyError: If the key is shorter than 16 non-blank characters.
    """
    if not master_key or len(master_key.strip()) < MIN_MASTER_KEY_LENGTH:
        raise InvalidMasterKeyError(
            f"MASTER_KEY must be at least {MIN_MASTER_KEY_LENGTH} characters"
        )
    return hashlib.sha256(master_key.encode("utf-8")).digest()


def is_encrypted(value) -> bool:
    return isinstance(value, str) and value.startswith(ENCRYPTED_PREFIX)


def encrypt(plaintext: str, master_key: str) -> str:
    """Encrypt ``plaintext``; already-encrypted values are returned unchanged."""
    if is_encrypted(plaintext):
        return plaintext

    key = derive_key(master_key)
    nonce = os.urandom(NONCE_LENGTH)
    sealed = AESGCM(key).encrypt(nonce, plaintext.encode("utf-8"), None)
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]

    parts = [base64.b64encode(part).decode("ascii") for part in (nonce, tag, ciphertext)]
    return ENCRYPTED_PREFIX + ":".join(parts)


def decrypt(value: str, master_key: str) -> str:
    """Decrypt a value produced by ``encrypt``.

    Raises:
        InvalidMasterKeyError: If the master key is unusable.
        DecryptionError: If the payload is malformed or the tag does not verify.
    """
    if not is_encrypted(value):
        return value

    parts = value[len(ENCRYPTED_PREFIX):].split(":")
    if len(parts) not in (2, 3):
        raise DecryptionError(
            "Invalid encrypted value format: expected enc:<iv>:<tag>:<ciphertext>"
        )
    nonce_b64, tag_b64 = parts[0], parts[1]
    ciphertext_b64 = parts[2] if len(parts) == 3 else ""
    if not nonce_b64 or not tag_b64:
        raise DecryptionError("Invalid encrypted value format: missing iv or tag")

    try:
        nonce = base64.b64decode(nonce_b64, validate=True)
        tag = base64.b64decode(tag_b64, validate=True)
        ciphertext = base64.b64decode(ciphertext_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecryptionError(
            "Invalid encrypted value format: invalid base64 encoding"
        ) from e

    if len(nonce) != NONCE_LENGTH:
        raise DecryptionError(
            f"Invalid IV length: expected {NONCE_LENGTH} bytes, got {len(nonce)}"
        )

    key = derive_key(master_key)
    try:
        plaintext = AESGCM(key).decrypt(nonce, ciphertext + tag, None)
    except InvalidTag as e:
        raise DecryptionError(
            "Decryption failed: authentication tag verification failed"
        ) from e
    return plaintext.decode("utf-8")


def mask_secret(value: str, visible_chars: int = 4) -> str:
    """Mask all but the last ``visible_chars`` characters."""
    if not value:
        return ""
    if visible_chars <= 0:
        return "*" * len(value)
    if visible_chars >= len(value):
        return value
    return "*" * (len(value) - visible_chars) + value[-visible_chars:]


def mask_api_key(value: str) -> str:
    """Mask an API key keeping a short prefix and suffix, e.g. ``re_abc****wxyz``."""
    if not value:
        return ""
    if len(value) <= 4:
        return mask_secret(value, 0)

    prefix_length = min(8, len(value) // 4)
    visible_length = min(4, len(value) // 8)
    if visible_length == 0 or len(value) <= prefix_length + visible_length:
        return mask_secret(value, min(2, len(value)))

    masked_length = len(value) - prefix_length - visible_length
    return value[:prefix_length] + "*" * masked_length + value[-visible_length:]


def mask_webhook_url(value: str) -> str:
    """Mask the secret path segment and credential-like query parameters."""
    if not value:
        return ""
    try:
        url = urlsplit(value)
    except ValueError:
        return mask_secret(value, 4)
    if not url.scheme or not url.hostname:
        return mask_secret(value, 4)

    path = url.path
    segments = [segment for segment in path.split("/") if segment]
    if segments and len(segments[-1]) > 8:
        last = segments[-1]
        path = path[: path.rindex(last)] + mask_secret(last, 4)

    masked = f"{url.scheme}://{url.hostname}{path}"
    if url.query:
        params = []
        for key, val in parse_qsl(url.query, keep_blank_values=True):
            if _SENSITIVE_QUERY_KEY.search(key):
                val = mask_secret(val, 0)
            params.append(f"{key}={val}")
        masked += "?" + "&".join(params)
    return masked
