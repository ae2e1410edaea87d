"""Secret encryption and masking helpers.

Exports:
    encrypt / decrypt: AES-256-GCM ``enc:`` values keyed by the master key
    is_encrypted: Detect the ``enc:`` prefix
    mask_secret / mask_api_key / mask_webhook_url: Safe display helpers
"""

from infrastructure.security.crypto import (
    ENCRYPTED_PREFIX,
    CryptoError,
    DecryptionError,
    InvalidMasterKeyError,
    decrypt,
    derive_key,
    encrypt,
    is_encrypted,
    mask_api_key,
    mask_secret,
    mask_webhook_url,
)

__all__ = [
    "ENCRYPTED_PREFIX",
    "CryptoError",
    "DecryptionError",
    "InvalidMasterKeyError",
    "decrypt",
    "derive_key",
    "encrypt",
    "is_encrypted",
    "mask_api_key",
    "mask_secret",
    "mask_webhook_url",
]
