# -*- coding: utf-8 -*-
"""
Модуль: nocrypto/credentials.py

RU: Выпуск набора учётных данных для тега: пара ключей RSA, OTP-секрет (TOTP,
совместим с Google Authenticator, Authy, FreeOTP) и API-ключ. Всё или ничего:
при любой ошибке частичный набор не возвращается.

EN: Credential bundle provisioning for a tag: RSA keypair, OTP seed and API key,
all-or-nothing. Also small TOTP helpers using the configured interval and window.
"""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from typing import Final, Optional

import pyotp

from nocrypto.asymmetric import RSACipher
from nocrypto.config import CryptoDefaults
from nocrypto.protocols import OtpSeedGenerator, RandomStringGenerator

__all__ = [
    "CredentialBundle",
    "CredentialProvisioner",
    "PyOtpSeedGenerator",
    "SecretsStringGenerator",
    "create_credentials",
    "verify_otp",
    "provisioning_uri",
]

_LOGGER: Final = logging.getLogger(__name__)

API_KEY_ALPHABET: Final[str] = string.ascii_letters + string.digits
DEFAULT_ISSUER: Final[str] = "NoCrypto"


class PyOtpSeedGenerator:
    """OTP seeds as base32 text via pyotp (at least 32 chars / 160 bits)."""

    __slots__ = ()

    def generate(self, size: int) -> str:
        return pyotp.random_base32(length=int(size))


class SecretsStringGenerator:
    """Alphanumeric random strings from the secrets module."""

    __slots__ = ("alphabet",)

    def __init__(self, alphabet: str = API_KEY_ALPHABET) -> None:
        if len(set(alphabet)) < 2:
            raise ValueError("alphabet must contain at least 2 distinct characters")
        self.alphabet = alphabet

    def generate(self, length: int) -> str:
        if length <= 0:
            raise ValueError("length must be positive")
        return "".join(secrets.choice(self.alphabet) for _ in range(length))


@dataclass(frozen=True)
class CredentialBundle:
    """
    Four-part credential set for one tag; all values are text.

    private_key/public_key are base64 PKCS#1 DER (see RSACipher.serialize),
    otp_key is a base32 TOTP seed, api_key is an alphanumeric string.
    """

    private_key: str
    public_key: str
    otp_key: str
    api_key: str

    def __repr__(self) -> str:
        return f"CredentialBundle(public_key={self.public_key[:16]}..., <redacted>)"

    def totp(self, interval: Optional[int] = None) -> pyotp.TOTP:
        """TOTP for the seed; interval defaults to CryptoDefaults.otp_interval."""
        if interval is None:
            interval = CryptoDefaults().otp_interval
        return pyotp.TOTP(self.otp_key, interval=interval)


class CredentialProvisioner:
    """
    Compose RSA keypair generation with OTP seed and API key generators.

    Example:
        >>> bundle = CredentialProvisioner().create_credentials("tag1")
        >>> len(bundle.api_key)
        40
    """

    def __init__(
        self,
        rsa_cipher: Optional[RSACipher] = None,
        otp_generator: Optional[OtpSeedGenerator] = None,
        api_key_generator: Optional[RandomStringGenerator] = None,
        defaults: Optional[CryptoDefaults] = None,
    ) -> None:
        self._rsa = rsa_cipher or RSACipher()
        self._otp = otp_generator or PyOtpSeedGenerator()
        self._api = api_key_generator or SecretsStringGenerator()
        self.defaults = defaults or CryptoDefaults()

    def create_credentials(self, tag: str) -> CredentialBundle:
        """
        Generate keypair, OTP seed and API key, in this order.

        The first failing step's exception propagates unchanged.
        """
        d = self.defaults
        private_key, public_key = self._rsa.generate_key_pair_text(d.rsa_key_size, tag)
        otp_key = self._otp.generate(int(d.otp_key_size))
        api_key = self._api.generate(d.api_key_length)
        _LOGGER.info("Credentials created (rsa=%d bits)", int(d.rsa_key_size))
        return CredentialBundle(private_key, public_key, otp_key, api_key)

    def verify_otp(self, otp_key: str, code: str) -> bool:
        """Check a TOTP code within the configured interval and drift window."""
        totp = pyotp.TOTP(otp_key, interval=self.defaults.otp_interval)
        return bool(totp.verify(code, valid_window=self.defaults.otp_valid_window))

    def totp(self, bundle: CredentialBundle) -> pyotp.TOTP:
        return bundle.totp(self.defaults.otp_interval)

    def provisioning_uri(
        self, bundle: CredentialBundle, name: str, issuer: str = DEFAULT_ISSUER
    ) -> str:
        """otpauth:// URI with the same period verify_otp() checks against."""
        return self.totp(bundle).provisioning_uri(name=name, issuer_name=issuer)


def create_credentials(
    tag: str, defaults: Optional[CryptoDefaults] = None
) -> CredentialBundle:
    return CredentialProvisioner(defaults=defaults).create_credentials(tag)


def verify_otp(
    otp_key: str, code: str, defaults: Optional[CryptoDefaults] = None
) -> bool:
    return CredentialProvisioner(defaults=defaults).verify_otp(otp_key, code)


def provisioning_uri(
    bundle: CredentialBundle,
    name: str,
    issuer: str = DEFAULT_ISSUER,
    defaults: Optional[CryptoDefaults] = None,
) -> str:
    """otpauth:// URI for enrolling the bundle's OTP seed in an authenticator app."""
    return CredentialProvisioner(defaults=defaults).provisioning_uri(bundle, name, issuer)
