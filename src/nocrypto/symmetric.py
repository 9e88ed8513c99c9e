# -*- coding: utf-8 -*-
"""
RU: Симметричное шифрование AES в двух явно именованных конструкциях:
устаревшая AES-CBC + PKCS7 с нулевым IV (только для совместимости) и
AES-GCM со случайным nonce и аутентификацией (рекомендуется).

EN: AES symmetric encryption in two explicitly named constructions:
legacy AES-CBC + PKCS7 with an all-zero IV (compatibility only) and
AES-GCM with a random nonce per message and authentication (recommended).

⚠️ SECURITY NOTE: AesCbcCipher reproduces existing ciphertexts.
- No IV is transmitted; the IV is 16 zero bytes, so equal plaintext prefixes under
  one key give equal ciphertext prefixes.
- No authentication: decryption only detects invalid padding. A wrong key or a
  tampered blob can still decrypt to garbage with valid padding (~1/256).
- Use AesGcmCipher for anything new. Never mix the two on one payload.

Combined GCM blob layout:
    nonce (12 bytes) || ciphertext (len(plaintext)) || tag (16 bytes)

Keys are raw bytes of 16/24/32 bytes, or their base64 text form. Every operation
accepts either; text that is not valid base64 raises KeyGenerationError.

Security notes:
- No secrets, keys, nonces, tags, or plaintext fragments are logged.
- Random material comes from an injectable SecureRandomSource
  (SystemRandomSource by default).
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, Final, Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from nocrypto.config import AES_KEY_BITS, AESMode, CryptoDefaults
from nocrypto.exceptions import DecryptionError, EncryptionError, KeyGenerationError
from nocrypto.protocols import ObjectCodec, SecureRandomSource
from nocrypto.serialization import JsonCodec
from nocrypto.utils import (
    BytesLike,
    SystemRandomSource,
    b64_decode,
    b64_encode,
    validate_key_length,
    zero_memory,
)

_LOGGER: Final = logging.getLogger(__name__)

BLOCK_LEN: Final[int] = 16
NONCE_LEN: Final[int] = 12
TAG_LEN: Final[int] = 16
KEY_LENGTHS: Final[tuple[int, ...]] = tuple(b // 8 for b in AES_KEY_BITS)
ZERO_IV: Final[bytes] = bytes(BLOCK_LEN)

KeyLike = Union[bytes, bytearray, str]

_legacy_warned = False


def key_to_text(key: BytesLike) -> str:
    """
    Base64 text form of a symmetric key.

    Example:
        >>> key_to_text(b"\\x00" * 16)
        'AAAAAAAAAAAAAAAAAAAAAA=='
    """
    return b64_encode(key)


def text_to_key(text: str) -> bytes:
    """
    Decode the base64 text form of a symmetric key.

    Raises:
        KeyGenerationError: if text is not valid base64.
    """
    try:
        return b64_decode(text)
    except ValueError as exc:
        _LOGGER.error("Symmetric key text is not valid base64")
        raise KeyGenerationError("Key text is not valid base64") from exc


class AesCipher:
    """
    Shared key handling, text adapters and object operations for AES constructions.

    Subclasses implement _encrypt/_decrypt on validated raw keys. Key size for
    generate_key() defaults to CryptoDefaults.aes_key_bits.
    """

    mode: ClassVar[AESMode]

    __slots__ = ("_random", "_codec", "_defaults")

    def __init__(
        self,
        *,
        random_source: Optional[SecureRandomSource] = None,
        codec: Optional[ObjectCodec] = None,
        defaults: Optional[CryptoDefaults] = None,
    ) -> None:
        self._random: SecureRandomSource = random_source or SystemRandomSource()
        self._codec: ObjectCodec = codec or JsonCodec()
        self._defaults: CryptoDefaults = defaults or CryptoDefaults()

    # --- keys ---

    def generate_key(self, bit_length: Optional[int] = None) -> bytes:
        """
        Generate a random AES key.

        Args:
            bit_length: 128, 192 or 256; the configured aes_key_bits if None.

        Raises:
            KeyGenerationError: on invalid size or random source failure.
        """
        if bit_length is None:
            bit_length = self._defaults.aes_key_bits
        if (
            isinstance(bit_length, bool)
            or not isinstance(bit_length, int)
            or bit_length not in AES_KEY_BITS
        ):
            raise KeyGenerationError(f"AES key size must be one of {AES_KEY_BITS} bits")
        n = bit_length // 8
        try:
            key = self._random.fill(n)
        except Exception as exc:
            _LOGGER.error("Random source failed: %s", exc.__class__.__name__)
            raise KeyGenerationError("Secure random source failed") from exc
        if not isinstance(key, (bytes, bytearray)) or len(key) != n:
            raise KeyGenerationError("Secure random source returned a short buffer")
        return bytes(key)

    def generate_key_text(self, bit_length: Optional[int] = None) -> str:
        return key_to_text(self.generate_key(bit_length))

    key_to_text = staticmethod(key_to_text)
    text_to_key = staticmethod(text_to_key)

    @staticmethod
    def _raw_key(key: KeyLike, error: type[Exception]) -> bytes:
        raw = text_to_key(key) if isinstance(key, str) else key
        try:
            validate_key_length(raw, KEY_LENGTHS)
        except ValueError as exc:
            raise error("AES key must be 16, 24 or 32 bytes") from exc
        return bytes(raw)

    # --- bytes ---

    def encrypt(self, data: BytesLike, key: KeyLike) -> bytes:
        """
        Encrypt bytes.

        Raises:
            EncryptionError: on invalid key length or cipher failure.
            KeyGenerationError: if key is text and not valid base64.
        """
        if not isinstance(data, (bytes, bytearray)):
            raise EncryptionError("data must be bytes")
        raw = self._raw_key(key, EncryptionError)
        return self._encrypt(bytes(data), raw)

    def decrypt(self, data: BytesLike, key: KeyLike) -> bytes:
        """
        Decrypt bytes produced by encrypt() of the same construction.

        Raises:
            DecryptionError: on malformed ciphertext, wrong key or failed authentication.
            KeyGenerationError: if key is text and not valid base64.
        """
        if not isinstance(data, (bytes, bytearray)):
            raise DecryptionError("data must be bytes")
        raw = self._raw_key(key, DecryptionError)
        return self._decrypt(bytes(data), raw)

    def _encrypt(self, data: bytes, key: bytes) -> bytes:
        raise NotImplementedError

    def _decrypt(self, data: bytes, key: bytes) -> bytes:
        raise NotImplementedError

    # --- objects ---

    def encrypt_object(
        self, obj: Any, key: KeyLike, codec: Optional[ObjectCodec] = None
    ) -> bytes:
        """Serialize obj with the codec, then encrypt. Errors of either step propagate."""
        data = (codec or self._codec).encode(obj)
        return self.encrypt(data, key)

    def decrypt_object(
        self,
        data: BytesLike,
        key: KeyLike,
        target_type: Optional[type] = None,
        codec: Optional[ObjectCodec] = None,
    ) -> Any:
        """Decrypt, then deserialize with the codec. Errors of either step propagate."""
        plaintext = self.decrypt(data, key)
        return (codec or self._codec).decode(plaintext, target_type)


class AesCbcCipher(AesCipher):
    """
    Legacy AES-CBC + PKCS7 with a zero IV and no authentication.

    Output length is len(data) rounded up to the next 16-byte boundary (a full
    padding block is added when len(data) is already a multiple of 16).

    Examples:
        >>> c = AesCbcCipher()
        >>> key = c.generate_key()
        >>> len(c.encrypt(b"x" * 16, key))
        32
        >>> c.decrypt(c.encrypt(b"hello", key), key)
        b'hello'
    """

    mode = AESMode.CBC_PKCS7

    __slots__ = ()

    @staticmethod
    def _warn_legacy() -> None:
        global _legacy_warned
        if not _legacy_warned:
            _legacy_warned = True
            _LOGGER.warning(
                "AES-CBC with zero IV is unauthenticated and deterministic; "
                "use AES-GCM for new data"
            )

    def _encrypt(self, data: bytes, key: bytes) -> bytes:
        self._warn_legacy()
        padded = bytearray()
        try:
            padder = padding.PKCS7(algorithms.AES.block_size).padder()
            padded += padder.update(data) + padder.finalize()
            encryptor = Cipher(algorithms.AES(key), modes.CBC(ZERO_IV)).encryptor()
            ciphertext = encryptor.update(bytes(padded)) + encryptor.finalize()
        except Exception as exc:
            _LOGGER.error("AES-CBC encryption failed: %s", exc.__class__.__name__)
            raise EncryptionError("AES-CBC encryption failed") from exc
        finally:
            zero_memory(padded)
        _LOGGER.debug("AES-CBC encrypted %d bytes", len(data))
        return ciphertext

    def _decrypt(self, data: bytes, key: bytes) -> bytes:
        self._warn_legacy()
        if not data or len(data) % BLOCK_LEN:
            raise DecryptionError("Ciphertext length must be a non-zero multiple of 16")
        padded = bytearray()
        try:
            decryptor = Cipher(algorithms.AES(key), modes.CBC(ZERO_IV)).decryptor()
            padded += decryptor.update(data) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plaintext = unpadder.update(bytes(padded)) + unpadder.finalize()
        except ValueError as exc:
            _LOGGER.warning("AES-CBC padding check failed")
            raise DecryptionError("Invalid padding (wrong key or corrupted data)") from exc
        except Exception as exc:
            _LOGGER.error("AES-CBC decryption failed: %s", exc.__class__.__name__)
            raise DecryptionError("AES-CBC decryption failed") from exc
        finally:
            zero_memory(padded)
        return plaintext


class AesGcmCipher(AesCipher):
    """
    AES-GCM with a fresh random 96-bit nonce and a combined output blob.

    Decryption fails closed: plaintext is returned only after the tag verifies.

    Examples:
        >>> c = AesGcmCipher()
        >>> key = c.generate_key()
        >>> blob = c.encrypt(b"hello", key)
        >>> len(blob) == 12 + 5 + 16
        True
        >>> c.decrypt(blob, key)
        b'hello'
    """

    mode = AESMode.GCM

    __slots__ = ()

    def _encrypt(self, data: bytes, key: bytes) -> bytes:
        try:
            nonce = bytes(self._random.fill(NONCE_LEN))
        except Exception as exc:
            _LOGGER.error("Nonce generation failed: %s", exc.__class__.__name__)
            raise EncryptionError("Nonce generation failed") from exc
        if len(nonce) != NONCE_LEN:
            raise EncryptionError("Secure random source returned a short nonce")

        try:
            encryptor = Cipher(algorithms.AES(key), modes.GCM(nonce)).encryptor()
            ciphertext = encryptor.update(data) + encryptor.finalize()
            tag = encryptor.tag
        except Exception as exc:
            _LOGGER.error("AES-GCM encryption failed: %s", exc.__class__.__name__)
            raise EncryptionError("AES-GCM encryption failed") from exc
        _LOGGER.debug("AES-GCM encrypted %d bytes", len(data))
        return nonce + ciphertext + tag

    def _decrypt(self, data: bytes, key: bytes) -> bytes:
        if len(data) < NONCE_LEN + TAG_LEN:
            raise DecryptionError("Combined ciphertext must include nonce and 16-byte tag")
        nonce = data[:NONCE_LEN]
        ct = data[NONCE_LEN:-TAG_LEN]
        tag = data[-TAG_LEN:]
        try:
            decryptor = Cipher(algorithms.AES(key), modes.GCM(nonce, tag)).decryptor()
            plaintext = decryptor.update(ct) + decryptor.finalize()
        except InvalidTag as exc:
            _LOGGER.warning("AES-GCM tag verification failed")
            raise DecryptionError("Invalid authentication tag") from exc
        except Exception as exc:
            _LOGGER.error("AES-GCM decryption failed: %s", exc.__class__.__name__)
            raise DecryptionError("AES-GCM decryption failed") from exc
        return plaintext


_CIPHERS: Final[Dict[AESMode, type[AesCipher]]] = {
    AESMode.CBC_PKCS7: AesCbcCipher,
    AESMode.GCM: AesGcmCipher,
}


def get_symmetric_cipher(
    mode: Optional[Union[AESMode, str]] = None,
    *,
    random_source: Optional[SecureRandomSource] = None,
    codec: Optional[ObjectCodec] = None,
    defaults: Optional[CryptoDefaults] = None,
) -> AesCipher:
    """
    Return the construction for a mode.

    Args:
        mode: AES construction; defaults.aes_mode if None (GCM out of the box).
        defaults: configured defaults, also used for generate_key() sizes.

    Raises:
        ValueError: for an unknown mode.
    """
    defaults = defaults or CryptoDefaults()
    if mode is None:
        mode = defaults.aes_mode
    try:
        cls = _CIPHERS[AESMode(mode)]
    except ValueError:
        _LOGGER.error("Unsupported AES mode: %s", mode)
        raise
    return cls(random_source=random_source, codec=codec, defaults=defaults)


def generate_key(
    bit_length: Optional[int] = None, *, defaults: Optional[CryptoDefaults] = None
) -> bytes:
    """Generate a random AES key; size falls back to defaults.aes_key_bits."""
    return AesGcmCipher(defaults=defaults).generate_key(bit_length)


def generate_key_text(
    bit_length: Optional[int] = None, *, defaults: Optional[CryptoDefaults] = None
) -> str:
    return key_to_text(generate_key(bit_length, defaults=defaults))


def encrypt(
    data: BytesLike,
    key: KeyLike,
    *,
    mode: Optional[Union[AESMode, str]] = None,
    defaults: Optional[CryptoDefaults] = None,
) -> bytes:
    return get_symmetric_cipher(mode, defaults=defaults).encrypt(data, key)


def decrypt(
    data: BytesLike,
    key: KeyLike,
    *,
    mode: Optional[Union[AESMode, str]] = None,
    defaults: Optional[CryptoDefaults] = None,
) -> bytes:
    return get_symmetric_cipher(mode, defaults=defaults).decrypt(data, key)


def encrypt_object(
    obj: Any,
    key: KeyLike,
    *,
    mode: Optional[Union[AESMode, str]] = None,
    codec: Optional[ObjectCodec] = None,
    defaults: Optional[CryptoDefaults] = None,
) -> bytes:
    return get_symmetric_cipher(mode, defaults=defaults).encrypt_object(obj, key, codec)


def decrypt_object(
    data: BytesLike,
    key: KeyLike,
    target_type: Optional[type] = None,
    *,
    mode: Optional[Union[AESMode, str]] = None,
    codec: Optional[ObjectCodec] = None,
    defaults: Optional[CryptoDefaults] = None,
) -> Any:
    return get_symmetric_cipher(mode, defaults=defaults).decrypt_object(
        data, key, target_type, codec
    )


__all__ = [
    "BLOCK_LEN",
    "NONCE_LEN",
    "TAG_LEN",
    "KEY_LENGTHS",
    "AesCbcCipher",
    "AesGcmCipher",
    "AesCipher",
    "get_symmetric_cipher",
    "key_to_text",
    "text_to_key",
    "generate_key",
    "generate_key_text",
    "encrypt",
    "decrypt",
    "encrypt_object",
    "decrypt_object",
]
