"""
Модуль асимметричного шифрования RSA: генерация ключевых пар, экспорт/импорт ключей
в текстовом виде, шифрование открытым и расшифрование закрытым ключом.

Особенности:
- Внешнее представление ключей: PKCS#1 DER (RSAPrivateKey / RSAPublicKey), закодированное в base64.
- Импорт ключа требует явного класса (открытый/закрытый) и размера; при несовпадении InvalidKeyMaterialError.
- Паддинг PKCS#1 v1.5 для совместимости с существующими шифртекстами (для новых систем предпочтителен OAEP,
  но он несовместим по формату).
- Fail-secure: любая ошибка провайдера оборачивается в типизированное исключение, ничего не усекается молча.
- Secure Logging: ключи, открытые тексты и чувствительные теги не попадают в логи.

Основные классы:
- KeyPair: неизменяемая пара ключей с тегом приложения.
- RSACipher: генерация, сериализация, шифрование/расшифрование байт и объектов.

EN: RSA keypairs with base64 PKCS#1 DER text form and PKCS#1 v1.5 encryption.
Maximum plaintext is key_size // 8 - 11 bytes; larger payloads raise EncryptionError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from hashlib import sha256
from typing import Any, Final, Mapping, Optional, Tuple, Union, cast

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from nocrypto.config import RSAKeySize
from nocrypto.exceptions import (
    DecryptionError,
    EncryptionError,
    InvalidKeyMaterialError,
    KeyExportError,
    KeyPairGenerationError,
)
from nocrypto.protocols import ObjectCodec
from nocrypto.serialization import JsonCodec
from nocrypto.utils import BytesLike, b64_decode, b64_encode

logger = logging.getLogger(__name__)

__all__ = [
    "KeyPair",
    "RSACipher",
    "RSAKey",
    "PKCS1_V15_OVERHEAD",
    "max_payload_size",
    "generate_key_pair",
    "generate_key_pair_text",
    "serialize_key",
    "deserialize_key",
    "encrypt",
    "decrypt",
    "encrypt_object",
    "decrypt_object",
]

PUBLIC_EXPONENT: Final[int] = 65537
PKCS1_V15_OVERHEAD: Final[int] = 11
SENSITIVE_KEYWORDS = ("password", "secret", "token", "pem", "begin rsa")

RSAKey = Union[rsa.RSAPrivateKey, rsa.RSAPublicKey]


def _secure_log(
    msg: str,
    *args: Any,
    extra: Optional[Mapping[str, Any]] = None,
) -> None:
    text = msg.lower() + "".join(str(a).lower() for a in args)
    if any(word in text for word in SENSITIVE_KEYWORDS):
        return
    logger.info(msg, *args, extra=extra)


def _key_size(size: Union[RSAKeySize, int], error: type[Exception]) -> RSAKeySize:
    allowed = ", ".join(str(int(s)) for s in RSAKeySize)
    if isinstance(size, bool) or not isinstance(size, int):
        raise error(f"RSA key size must be an integer, one of {allowed} bits")
    try:
        return RSAKeySize(size)
    except ValueError as e:
        raise error(f"RSA key size must be one of {allowed} bits") from e


def max_payload_size(key_size: Union[RSAKeySize, int]) -> int:
    """Largest PKCS#1 v1.5 plaintext for a modulus size, in bytes."""
    return int(key_size) // 8 - PKCS1_V15_OVERHEAD


@dataclass(frozen=True)
class KeyPair:
    """
    RSA keypair tagged with an application identifier.

    The tag addresses the key in the host environment's key store; it has no
    cryptographic meaning. Immutable, safe to share between threads.

    Example usage:
        >>> kp = RSACipher().generate_key_pair(RSAKeySize.KEY_2048, tag="user-1")
        >>> kp.tag
        'user-1'
        >>> RSACipher().deserialize(kp.public_key_text(), True, 2048).key_size
        2048
    """

    private_key: rsa.RSAPrivateKey
    public_key: rsa.RSAPublicKey
    tag: str
    key_size: RSAKeySize

    def private_key_text(self) -> str:
        return serialize_key(self.private_key)

    def public_key_text(self) -> str:
        return serialize_key(self.public_key)

    def public_fingerprint(self) -> str:
        der = self.public_key.public_bytes(
            serialization.Encoding.DER, serialization.PublicFormat.PKCS1
        )
        return sha256(der).hexdigest()


class RSACipher:
    """
    RSA codec: keypair generation, key text round-trip and PKCS#1 v1.5 encryption.

    Keys are passed to encrypt/decrypt in their serialized text form together with
    the declared size, mirroring how callers store them.

    Example usage:
        >>> rc = RSACipher()
        >>> priv, pub = rc.generate_key_pair_text(2048, tag="svc")
        >>> ct = rc.encrypt(b"hi", pub, 2048)
        >>> rc.decrypt(ct, priv, 2048)
        b'hi'
    """

    __slots__ = ("_codec",)

    def __init__(self, codec: Optional[ObjectCodec] = None) -> None:
        self._codec: ObjectCodec = codec or JsonCodec()

    def generate_key_pair(
        self, key_size: Union[RSAKeySize, int], tag: str
    ) -> KeyPair:
        """
        Generate an RSA keypair.

        Raises:
            KeyPairGenerationError: invalid size, invalid tag or provider failure.
        """
        ks = _key_size(key_size, KeyPairGenerationError)
        if not isinstance(tag, str) or not tag:
            raise KeyPairGenerationError("tag must be a non-empty string")
        if ks is RSAKeySize.KEY_1024:
            logger.warning("Generating 1024-bit RSA keypair; this size is weak")
        _secure_log("Generating RSA keypair: size=%d tag=%s", int(ks), tag)
        try:
            private = rsa.generate_private_key(
                public_exponent=PUBLIC_EXPONENT, key_size=int(ks)
            )
        except Exception as e:
            logger.error("RSA keypair generation failed: %s", type(e).__name__)
            raise KeyPairGenerationError("RSA keypair generation failed") from e
        return KeyPair(private, private.public_key(), tag, ks)

    def generate_key_pair_text(
        self, key_size: Union[RSAKeySize, int], tag: str
    ) -> Tuple[str, str]:
        """Generate a keypair and return (private_key_text, public_key_text)."""
        kp = self.generate_key_pair(key_size, tag)
        return kp.private_key_text(), kp.public_key_text()

    @staticmethod
    def serialize(key: RSAKey) -> str:
        """
        Export a key as base64 PKCS#1 DER.

        Raises:
            KeyExportError: non-RSA input or export failure.
        """
        try:
            if isinstance(key, rsa.RSAPrivateKey):
                der = key.private_bytes(
                    serialization.Encoding.DER,
                    serialization.PrivateFormat.TraditionalOpenSSL,
                    serialization.NoEncryption(),
                )
            elif isinstance(key, rsa.RSAPublicKey):
                der = key.public_bytes(
                    serialization.Encoding.DER, serialization.PublicFormat.PKCS1
                )
            else:
                raise KeyExportError(f"Not an RSA key: {type(key).__name__}")
        except KeyExportError:
            raise
        except Exception as e:
            logger.error("RSA key export failed: %s", type(e).__name__)
            raise KeyExportError("RSA key export failed") from e
        return b64_encode(der)

    @staticmethod
    def deserialize(
        text: str, is_public: bool, key_size: Union[RSAKeySize, int]
    ) -> RSAKey:
        """
        Rebuild a key from its base64 text and the declared class and size.

        Raises:
            InvalidKeyMaterialError: bad base64, wrong class, non-RSA or size mismatch.
        """
        ks = _key_size(key_size, InvalidKeyMaterialError)
        try:
            der = b64_decode(text)
        except ValueError as e:
            raise InvalidKeyMaterialError("Key text is not valid base64") from e

        kind = "public" if is_public else "private"
        try:
            key: object
            if is_public:
                key = serialization.load_der_public_key(der)
            else:
                key = serialization.load_der_private_key(der, password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            logger.error("RSA %s key import failed: %s", kind, type(e).__name__)
            raise InvalidKeyMaterialError(f"Failed to import {kind} key") from e

        expected = rsa.RSAPublicKey if is_public else rsa.RSAPrivateKey
        if not isinstance(key, expected):
            raise InvalidKeyMaterialError(f"Key material is not an RSA {kind} key")
        if key.key_size != int(ks):
            raise InvalidKeyMaterialError(
                f"RSA key size {key.key_size} does not match declared {int(ks)}"
            )
        return key

    def encrypt(
        self,
        data: BytesLike,
        public_key_text: str,
        key_size: Union[RSAKeySize, int],
    ) -> bytes:
        """
        Encrypt with the public key, PKCS#1 v1.5 padding.

        Raises:
            InvalidKeyMaterialError: public key text cannot be rebuilt.
            EncryptionError: payload too large or provider failure.
        """
        if not isinstance(data, (bytes, bytearray)):
            raise EncryptionError("data must be bytes")
        key = cast(rsa.RSAPublicKey, self.deserialize(public_key_text, True, key_size))
        limit = max_payload_size(key.key_size)
        if len(data) > limit:
            raise EncryptionError(f"RSA plain length must be <= {limit} bytes for key")
        try:
            return key.encrypt(bytes(data), padding.PKCS1v15())
        except Exception as e:
            logger.error("RSA encryption failed: %s", type(e).__name__)
            raise EncryptionError("RSA encryption failed") from e

    def decrypt(
        self,
        data: BytesLike,
        private_key_text: str,
        key_size: Union[RSAKeySize, int],
    ) -> bytes:
        """
        Decrypt with the private key, PKCS#1 v1.5 padding.

        Raises:
            InvalidKeyMaterialError: private key text cannot be rebuilt.
            DecryptionError: wrong ciphertext length, bad padding or provider failure.
        """
        if not isinstance(data, (bytes, bytearray)):
            raise DecryptionError("data must be bytes")
        key = cast(
            rsa.RSAPrivateKey, self.deserialize(private_key_text, False, key_size)
        )
        if len(data) != key.key_size // 8:
            raise DecryptionError("Ciphertext length does not match the key size")
        try:
            return key.decrypt(bytes(data), padding.PKCS1v15())
        except Exception as e:
            logger.warning("RSA decryption failed: %s", type(e).__name__)
            raise DecryptionError("RSA decryption failed") from e

    def encrypt_object(
        self,
        obj: Any,
        public_key_text: str,
        key_size: Union[RSAKeySize, int],
        codec: Optional[ObjectCodec] = None,
    ) -> bytes:
        data = (codec or self._codec).encode(obj)
        return self.encrypt(data, public_key_text, key_size)

    def decrypt_object(
        self,
        data: BytesLike,
        private_key_text: str,
        key_size: Union[RSAKeySize, int],
        target_type: Optional[type] = None,
        codec: Optional[ObjectCodec] = None,
    ) -> Any:
        plaintext = self.decrypt(data, private_key_text, key_size)
        return (codec or self._codec).decode(plaintext, target_type)


_DEFAULT_CIPHER: Final = RSACipher()

serialize_key = RSACipher.serialize
deserialize_key = RSACipher.deserialize
generate_key_pair = _DEFAULT_CIPHER.generate_key_pair
generate_key_pair_text = _DEFAULT_CIPHER.generate_key_pair_text
encrypt = _DEFAULT_CIPHER.encrypt
decrypt = _DEFAULT_CIPHER.decrypt
encrypt_object = _DEFAULT_CIPHER.encrypt_object
decrypt_object = _DEFAULT_CIPHER.decrypt_object
