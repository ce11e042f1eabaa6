"""AES-GCM authenticated encryption for string columns.

Stored values are ``base64(nonce || tag || ciphertext)``: a 12-byte random
nonce, the 16-byte GCM tag, then ciphertext the same length as the UTF-8
plaintext. This layout is persisted data; changing it breaks every stored row.

``None`` and ``""`` are passed through unchanged in both directions, so an
observer of the table can tell empty values from non-empty ones.
"""

import base64
import binascii
import logging
import os
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Union

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .exceptions import (
    AuthenticationFailedError,
    CipherUnavailableError,
    InvalidKeyLengthError,
    InvalidKeyTypeError,
    InvalidPlaintextEncodingError,
    MalformedEncodingError,
    MissingKeyError,
    TruncatedCiphertextError,
)

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)

NONCE_SIZE = 12
TAG_SIZE = 16
MIN_PAYLOAD_SIZE = NONCE_SIZE + TAG_SIZE
ALLOWED_KEY_LENGTHS = (16, 24, 32)


class ColumnEncryptionProvider(ABC):
    """Bidirectional string transform applied to a single column value."""

    @abstractmethod
    def encrypt(self, plaintext: Optional[str]) -> Optional[str]:
        """Return the storage representation of *plaintext*."""

    @abstractmethod
    def decrypt(self, ciphertext: Optional[str]) -> Optional[str]:
        """Return the plaintext for a stored value."""


class AesGcmColumnEncryptionProvider(ColumnEncryptionProvider):
    """AES-GCM codec with a 128, 192 or 256-bit key.

    Stateless apart from the key: every call builds its own ``AESGCM``
    primitive, so one instance can be shared across threads.
    """

    def __init__(self, key: Optional[Union[bytes, bytearray, memoryview]]):
        if key is None:
            raise MissingKeyError("Encryption key cannot be None")
        if not isinstance(key, (bytes, bytearray, memoryview)):
            raise InvalidKeyTypeError(
                f"Encryption key must be bytes, got {type(key).__name__}"
            )
        key = bytes(key) if isinstance(key, memoryview) else key
        if len(key) not in ALLOWED_KEY_LENGTHS:
            raise InvalidKeyLengthError(len(key), ALLOWED_KEY_LENGTHS)

        self._key: Optional[bytearray] = bytearray(key)
        logger.debug("Column encryption provider ready (AES-%d-GCM)", len(key) * 8)

    def __repr__(self) -> str:
        if self._key is None:
            return "<AesGcmColumnEncryptionProvider(closed)>"
        return f"<AesGcmColumnEncryptionProvider(AES-{len(self._key) * 8}-GCM)>"

    def __enter__(self) -> "AesGcmColumnEncryptionProvider":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._key is None

    def close(self) -> None:
        """Overwrite the key with zeros and release it. Idempotent.

        Only this instance's buffer is cleared. Each ``AESGCM`` built by
        :meth:`_cipher` holds its own copy of the key, which is left to the
        garbage collector.
        """
        if self._key is not None:
            self._key[:] = bytes(len(self._key))
            self._key = None

    def _cipher(self) -> AESGCM:
        if self._key is None:
            raise MissingKeyError("Encryption key has been released")
        try:
            return AESGCM(self._key)
        except UnsupportedAlgorithm as e:
            raise CipherUnavailableError(
                "AES-GCM is not supported by the installed cryptography backend"
            ) from e

    def encrypt(self, plaintext: Optional[str]) -> Optional[str]:
        """Encrypt *plaintext* under a fresh random nonce and return base64 text."""
        if not plaintext:
            return plaintext

        aesgcm = self._cipher()
        nonce = os.urandom(NONCE_SIZE)
        sealed = aesgcm.encrypt(nonce, plaintext.encode("utf-8"), None)

        # AESGCM returns ciphertext || tag; the stored layout puts the tag first.
        ciphertext, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
        return base64.b64encode(nonce + tag + ciphertext).decode("ascii")

    def decrypt(self, ciphertext: Optional[str]) -> Optional[str]:
        """Verify and decrypt a value produced by :meth:`encrypt`.

        Raises:
            MalformedEncodingError: *ciphertext* is not strict, padded base64.
            TruncatedCiphertextError: fewer than 28 bytes after decoding.
            AuthenticationFailedError: the tag does not verify.
            InvalidPlaintextEncodingError: verified bytes are not UTF-8.
        """
        if not ciphertext:
            return ciphertext

        try:
            payload = base64.b64decode(ciphertext, validate=True)
        except (binascii.Error, ValueError) as e:
            raise MalformedEncodingError("Encrypted value is not valid base64") from e

        if len(payload) < MIN_PAYLOAD_SIZE:
            raise TruncatedCiphertextError(
                f"Encrypted value must be at least {MIN_PAYLOAD_SIZE} bytes, got {len(payload)}"
            )

        nonce = payload[:NONCE_SIZE]
        tag = payload[NONCE_SIZE:MIN_PAYLOAD_SIZE]
        body = payload[MIN_PAYLOAD_SIZE:]

        aesgcm = self._cipher()
        try:
            plaintext = aesgcm.decrypt(nonce, body + tag, None)
        except InvalidTag as e:
            logger.warning("Column value failed authentication")
            raise AuthenticationFailedError(
                "Decryption failed. The data may be corrupted or the key is incorrect."
            ) from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidPlaintextEncodingError("Decrypted value is not valid UTF-8") from e


def provider_from_settings(
    settings: Optional["Settings"] = None,
) -> AesGcmColumnEncryptionProvider:
    """Build a new provider from ``COLUMN_ENCRYPTION_KEY``.

    Each call returns a fresh instance; pass it explicitly to the column
    types that need it.
    """
    if settings is None:
        from ..config import get_settings

        settings = get_settings()
    return AesGcmColumnEncryptionProvider(settings.get_column_encryption_key())
