"""Security utilities for verification codes."""

from __future__ import annotations

import base64
import logging
import secrets
from typing import Any

from jose import jwe
from jose.constants import ALGORITHMS
from jose.exceptions import JWEError, JWKError

from verification.exceptions import CryptoError
from verification.interfaces.error_reporter import ErrorReporter
from verification.interfaces.key_provider import KeyProvider

logger = logging.getLogger(__name__)

KEY_SIZE_BYTES = 32


def generate_encryption_key() -> str:
    """Generate a new URL-safe base64 key for CODE_ENCRYPTION_KEY."""
    return base64.urlsafe_b64encode(secrets.token_bytes(KEY_SIZE_BYTES)).decode("ascii")


def generate_verification_code() -> str:
    """Uniform 6-digit code in [100000, 999999]."""
    return str(secrets.randbelow(900000) + 100000)


class StaticKeyProvider:
    """Key provider backed by a single configured key."""

    def __init__(self, encoded_key: str | None) -> None:
        self._encoded_key = encoded_key

    def get_key(self) -> bytes:
        if not self._encoded_key:
            raise ValueError("CODE_ENCRYPTION_KEY is not configured")
        key = base64.urlsafe_b64decode(self._encoded_key.encode("ascii"))
        if len(key) != KEY_SIZE_BYTES:
            raise ValueError(f"Encryption key must be {KEY_SIZE_BYTES} bytes, got {len(key)}")
        return key


class CodeCipher:
    """
    Symmetric encryption for verification codes at rest.

    Ciphertext is a JWE compact serialization (direct key agreement), so it
    is authenticated and safe to store as text. Every failure is logged and
    reported before a generic CryptoError is raised.
    """

    def __init__(
        self,
        key_provider: KeyProvider,
        error_reporter: ErrorReporter,
        encryption: str = ALGORITHMS.A256GCM,
        log: logging.Logger | None = None,
    ) -> None:
        self._keys = key_provider
        self._reporter = error_reporter
        self._encryption = encryption
        self._logger = log or logger

    def encrypt(self, plaintext: str) -> str:
        try:
            token = jwe.encrypt(
                plaintext,
                self._keys.get_key(),
                algorithm=ALGORITHMS.DIR,
                encryption=self._encryption,
            )
        except (JWEError, JWKError, ValueError) as exc:
            self._report(exc, "Error while encrypting the secret code", {"operation": "encrypt"})
            raise CryptoError() from exc
        return token.decode("ascii") if isinstance(token, bytes) else token

    def decrypt(self, ciphertext: str) -> str:
        try:
            plaintext = jwe.decrypt(ciphertext, self._keys.get_key())
            if plaintext is None:
                raise JWEError("Empty JWE payload")
            return plaintext.decode("utf-8")
        except (JWEError, JWKError, ValueError) as exc:
            self._report(exc, "An error occurred while decrypting the secret code", {"operation": "decrypt"})
            raise CryptoError() from exc

    def _report(self, exc: Exception, message: str, context: dict[str, Any]) -> None:
        context = {**context, "encryption": self._encryption}
        self._reporter.capture_exception(exc, context)
        self._logger.error(f"[Crypto] {message}: {exc}", exc_info=exc)
