"""Reversible transform for sensitive free text (journal and report content).

NOT ENCRYPTION.  ``PlaceholderCipher`` only guarantees that the Entity Store
never holds the plaintext verbatim: it base64-encodes the URL-quoted text
behind a short salt derived from the user id.  A production deployment must
swap in authenticated encryption (AEAD with a per-user key from a key
management service) behind the same ``Cipher`` protocol, keeping the
sentinel behaviour of ``decrypt``.

Contract:
    - ``decrypt(encrypt(text, uid), uid) == text`` for every string.
    - Decrypting another user's ciphertext returns ``KEY_MISMATCH``.
    - Malformed ciphertext returns ``DECRYPTION_ERROR``.
    - Neither call raises.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Protocol
from urllib.parse import quote, unquote

logger = logging.getLogger("bloom.services.cipher")

KEY_MISMATCH = "Encrypted Content (Key Mismatch)"
DECRYPTION_ERROR = "Error decrypting content"

_SEPARATOR = "::"
_SALT_LENGTH = 4


class Cipher(Protocol):
    def encrypt(self, plaintext: str, user_id: str) -> str: ...

    def decrypt(self, ciphertext: str, user_id: str) -> str: ...


def derive_salt(user_id: str) -> str:
    return user_id[:_SALT_LENGTH]


class PlaceholderCipher:
    """Deterministic, user-keyed obfuscation.  See module docstring."""

    def encrypt(self, plaintext: str, user_id: str) -> str:
        payload = f"{derive_salt(user_id)}{_SEPARATOR}{quote(plaintext, safe='')}"
        return base64.b64encode(payload.encode("utf-8")).decode("ascii")

    def decrypt(self, ciphertext: str, user_id: str) -> str:
        try:
            decoded = base64.b64decode(ciphertext.encode("ascii"), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeError, ValueError, AttributeError) as exc:
            logger.warning("Decryption failed: %s", exc)
            return DECRYPTION_ERROR

        salt, sep, payload = decoded.rpartition(_SEPARATOR)
        if not sep:
            logger.warning("Decryption failed: missing salt separator")
            return DECRYPTION_ERROR
        if salt != derive_salt(user_id):
            return KEY_MISMATCH
        return unquote(payload)
