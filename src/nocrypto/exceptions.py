# -*- coding: utf-8 -*-
"""
RU: Иерархия исключений библиотеки: единый базовый класс и узкие подклассы для
шифрования, расшифрования, работы с ключами и сериализации объектов.

EN: Exception hierarchy for the library: one base class and narrow subclasses for
encryption, decryption, key handling and object serialization.

Guidelines:
- Never put keys, nonces, tags or plaintext into exception messages.
- Raise the narrowest subclass at the call site and chain the provider error
  with ``raise ... from exc``.
"""

from __future__ import annotations

from typing import Optional


class CryptoError(Exception):
    """Base exception for all library failures."""

    def __init__(
        self, message: str = "", *, cause: Optional[BaseException] = None
    ) -> None:
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


# Ciphers
class EncryptionError(CryptoError):
    """Raised on encryption failures (bad key length, oversized RSA payload, provider error)."""


class DecryptionError(CryptoError):
    """Raised on decryption failures (bad tag, bad padding, malformed ciphertext)."""


# Keys (avoid shadowing built-in KeyError)
class CryptoKeyError(CryptoError):
    """Base class for key generation/import/export errors."""


class KeyGenerationError(CryptoKeyError):
    """Raised when the random source fails or the requested key size is invalid."""


class KeyPairGenerationError(KeyGenerationError):
    """Raised when RSA keypair generation fails."""


class InvalidKeyMaterialError(CryptoKeyError):
    """Raised when serialized key text is not base64 or does not match the declared class/size."""


class KeyExportError(CryptoKeyError):
    """Raised when a key cannot be exported to its external representation."""


# Object codecs
class SerializationError(CryptoError):
    """Raised when a structured object cannot be encoded to or decoded from bytes."""


__all__ = [
    "CryptoError",
    "EncryptionError",
    "DecryptionError",
    "CryptoKeyError",
    "KeyGenerationError",
    "KeyPairGenerationError",
    "InvalidKeyMaterialError",
    "KeyExportError",
    "SerializationError",
]
