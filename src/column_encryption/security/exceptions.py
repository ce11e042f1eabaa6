"""Column encryption exception types.

Every failure raised by the codec or the column registration derives from
ColumnEncryptionError so storage-layer callers can catch one base class.
None of these are retryable: the same input fails the same way again.
"""

from typing import Optional, Tuple


class ColumnEncryptionError(Exception):
    """Base exception for all column encryption errors."""

    pass


class MissingKeyError(ColumnEncryptionError):
    """No key was supplied, or the key has already been released."""

    pass


class InvalidKeyTypeError(ColumnEncryptionError, TypeError):
    """Key is not a bytes-like object."""

    pass


class InvalidKeyLengthError(ColumnEncryptionError):
    """Key length is not one of the AES key sizes."""

    def __init__(self, key_length: int, allowed_lengths: Tuple[int, ...]):
        self.key_length = key_length
        self.allowed_lengths = allowed_lengths
        allowed = ", ".join(str(n) for n in allowed_lengths)
        super().__init__(
            f"Key length must be one of {allowed} bytes, got {key_length}"
        )


class MalformedEncodingError(ColumnEncryptionError):
    """Stored value is not valid base64."""

    pass


class TruncatedCiphertextError(ColumnEncryptionError):
    """Decoded value is too short to hold a nonce and a tag."""

    pass


class AuthenticationFailedError(ColumnEncryptionError):
    """Tag verification failed (wrong key, tampering or corruption)."""

    pass


class InvalidPlaintextEncodingError(ColumnEncryptionError):
    """Authenticated plaintext is not valid UTF-8."""

    pass


class CipherUnavailableError(ColumnEncryptionError):
    """The AES-GCM primitive is not available on this platform."""

    pass


class ColumnRegistrationError(ColumnEncryptionError):
    """A registered column cannot be resolved or cannot be encrypted."""

    def __init__(self, message: str, table: str = "", column: Optional[str] = None):
        self.table = table
        self.column = column
        super().__init__(message)
