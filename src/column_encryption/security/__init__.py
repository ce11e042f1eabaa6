"""Security module: the column codec, its errors, and the SQLAlchemy column type."""

from .encryption import (
    ALLOWED_KEY_LENGTHS,
    AesGcmColumnEncryptionProvider,
    ColumnEncryptionProvider,
    provider_from_settings,
)
from .exceptions import (
    AuthenticationFailedError,
    CipherUnavailableError,
    ColumnEncryptionError,
    ColumnRegistrationError,
    InvalidKeyLengthError,
    InvalidKeyTypeError,
    InvalidPlaintextEncodingError,
    MalformedEncodingError,
    MissingKeyError,
    TruncatedCiphertextError,
)
from .types import EncryptedText

__all__ = [
    "ALLOWED_KEY_LENGTHS",
    "AesGcmColumnEncryptionProvider",
    "ColumnEncryptionProvider",
    "provider_from_settings",
    "AuthenticationFailedError",
    "CipherUnavailableError",
    "ColumnEncryptionError",
    "ColumnRegistrationError",
    "InvalidKeyLengthError",
    "InvalidKeyTypeError",
    "InvalidPlaintextEncodingError",
    "MalformedEncodingError",
    "MissingKeyError",
    "TruncatedCiphertextError",
    "EncryptedText",
]
