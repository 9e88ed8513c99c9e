"""
NoCrypto
========

Small cryptographic utility library for application-level data protection:

    - AES symmetric encryption in two named constructions
      (AES-GCM, recommended; legacy AES-CBC + PKCS7 with zero IV)
    - RSA keypairs, base64 key text round-trip, PKCS#1 v1.5 encryption
    - Object-level encryption through an injectable codec (JSON by default)
    - Credential bundles: RSA keypair + OTP seed + API key per tag

Example:
    >>> from nocrypto import AesGcmCipher, RSACipher
    >>>
    >>> aes = AesGcmCipher()
    >>> key = aes.generate_key_text()
    >>> aes.decrypt(aes.encrypt(b"payload", key), key)
    b'payload'
    >>>
    >>> rsa = RSACipher()
    >>> priv, pub = rsa.generate_key_pair_text(2048, tag="svc")
    >>> rsa.decrypt_object(rsa.encrypt_object({"a": 1}, pub, 2048), priv, 2048)
    {'a': 1}

Logging:
    The package logger ``nocrypto`` carries only a NullHandler. Call
    ``configure_logging()`` (or set ``NOCRYPTO_LOG_LEVEL``) to get console output.
"""

import logging
import os
import sys
from typing import Optional, Union

from nocrypto.asymmetric import KeyPair, RSACipher
from nocrypto.config import AESMode, CryptoDefaults, OTPKeySize, RSAKeySize, load_config
from nocrypto.credentials import (
    CredentialBundle,
    CredentialProvisioner,
    create_credentials,
)
from nocrypto.exceptions import (
    CryptoError,
    CryptoKeyError,
    DecryptionError,
    EncryptionError,
    InvalidKeyMaterialError,
    KeyExportError,
    KeyGenerationError,
    KeyPairGenerationError,
    SerializationError,
)
from nocrypto.serialization import JsonCodec
from nocrypto.symmetric import (
    AesCbcCipher,
    AesCipher,
    AesGcmCipher,
    get_symmetric_cipher,
    key_to_text,
    text_to_key,
)
from nocrypto.utils import SystemRandomSource

__version__ = "0.1.0"

LOGGER_NAME = "nocrypto"
LOG_LEVEL_ENV = "NOCRYPTO_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

_LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def configure_logging(level: Optional[Union[str, int]] = None) -> logging.Logger:
    """
    Attach a stderr handler to the package logger.

    The level comes from the argument, else from NOCRYPTO_LOG_LEVEL, else WARNING.
    Idempotent: a second call only updates the level.

    Args:
        level: logging level name or number.

    Returns:
        The package logger.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, str):
        level = _LOG_LEVELS.get(level.upper(), logging.WARNING)

    root_logger = logging.getLogger(LOGGER_NAME)
    root_logger.setLevel(level)
    if any(getattr(h, "_nocrypto", False) for h in root_logger.handlers):
        return root_logger

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    handler._nocrypto = True  # type: ignore[attr-defined]
    root_logger.addHandler(handler)
    return root_logger


if os.environ.get(LOG_LEVEL_ENV):
    configure_logging()


__all__ = [
    "__version__",
    "configure_logging",
    # Symmetric
    "AesCipher",
    "AesCbcCipher",
    "AesGcmCipher",
    "get_symmetric_cipher",
    "key_to_text",
    "text_to_key",
    # Asymmetric
    "KeyPair",
    "RSACipher",
    # Credentials
    "CredentialBundle",
    "CredentialProvisioner",
    "create_credentials",
    # Config
    "AESMode",
    "RSAKeySize",
    "OTPKeySize",
    "CryptoDefaults",
    "load_config",
    # Collaborators
    "JsonCodec",
    "SystemRandomSource",
    # Errors
    "CryptoError",
    "CryptoKeyError",
    "EncryptionError",
    "DecryptionError",
    "KeyGenerationError",
    "KeyPairGenerationError",
    "InvalidKeyMaterialError",
    "KeyExportError",
    "SerializationError",
]
