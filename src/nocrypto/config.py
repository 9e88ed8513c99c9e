# -*- coding: utf-8 -*-
"""
RU: Параметры библиотеки: режимы AES, допустимые размеры ключей RSA и OTP,
значения по умолчанию для выпуска учётных данных и загрузка из JSON.

EN: Library parameters: AES modes, permitted RSA and OTP key sizes, credential
provisioning defaults and loading overrides from a JSON file.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Final, Optional, Union

_LOGGER: Final = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME: Final[str] = "nocrypto.json"


class AESMode(str, Enum):
    """Named AES constructions; callers pick one explicitly."""

    # Legacy: AES-CBC + PKCS7, zero IV, no authentication (compatibility only)
    CBC_PKCS7 = "cbc_pkcs7"

    # AES-GCM combined blob nonce||ciphertext||tag (recommended)
    GCM = "gcm"


class RSAKeySize(int, Enum):
    """Permitted RSA modulus sizes in bits."""

    # Weak; accepted for compatibility with existing key material only
    KEY_1024 = 1024
    KEY_2048 = 2048
    KEY_4096 = 4096


class OTPKeySize(int, Enum):
    """OTP seed sizes in base32 characters (32 chars = 160 bits)."""

    KEY_32 = 32
    KEY_40 = 40


AES_KEY_BITS: Final[tuple[int, ...]] = (128, 192, 256)
MIN_API_KEY_LENGTH: Final[int] = 16


@dataclass(frozen=True)
class CryptoDefaults:
    """
    Defaults used by the codecs and the credential provisioner.

    Attributes:
        aes_mode: construction used when none is given explicitly.
        aes_key_bits: symmetric key size for generate_key().
        rsa_key_size: keypair size used by create_credentials().
        otp_key_size: OTP seed length in base32 characters.
        api_key_length: API key length in characters.
        otp_interval: TOTP time step in seconds.
        otp_valid_window: accepted TOTP drift in steps (each direction).

    Examples:
        >>> CryptoDefaults().rsa_key_size
        <RSAKeySize.KEY_2048: 2048>
        >>> CryptoDefaults(aes_key_bits=100)
        Traceback (most recent call last):
        ...
        ValueError: aes_key_bits must be one of (128, 192, 256)
    """

    aes_mode: AESMode = AESMode.GCM
    aes_key_bits: int = 256
    rsa_key_size: RSAKeySize = RSAKeySize.KEY_2048
    otp_key_size: OTPKeySize = OTPKeySize.KEY_40
    api_key_length: int = 40
    otp_interval: int = 30
    otp_valid_window: int = 1

    def __post_init__(self) -> None:
        """Validate and coerce enum-typed fields."""
        for name in (
            "aes_key_bits",
            "rsa_key_size",
            "otp_key_size",
            "api_key_length",
            "otp_interval",
            "otp_valid_window",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {type(value).__name__}")
        object.__setattr__(self, "aes_mode", AESMode(self.aes_mode))
        object.__setattr__(self, "rsa_key_size", RSAKeySize(self.rsa_key_size))
        object.__setattr__(self, "otp_key_size", OTPKeySize(self.otp_key_size))
        if self.aes_key_bits not in AES_KEY_BITS:
            raise ValueError(f"aes_key_bits must be one of {AES_KEY_BITS}")
        if self.api_key_length < MIN_API_KEY_LENGTH:
            raise ValueError(f"api_key_length must be >= {MIN_API_KEY_LENGTH}")
        if self.otp_interval < 1:
            raise ValueError("otp_interval must be >= 1")
        if self.otp_valid_window < 0:
            raise ValueError("otp_valid_window must be >= 0")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["aes_mode"] = self.aes_mode.value
        data["rsa_key_size"] = int(self.rsa_key_size)
        data["otp_key_size"] = int(self.otp_key_size)
        return data


def load_config(config_path: Optional[Union[str, Path]] = None) -> CryptoDefaults:
    """
    Load defaults from a JSON object file merged over the built-in values.

    A missing file yields the built-in defaults. An unreadable file or invalid JSON
    is logged as a warning and also yields the defaults. Unknown keys are ignored
    with a warning.

    Args:
        config_path: JSON file; ``nocrypto.json`` in the working directory if None.

    Returns:
        CryptoDefaults instance.

    Raises:
        ValueError: if a known key carries an invalid value.
    """
    path = Path(config_path) if config_path is not None else Path(DEFAULT_CONFIG_FILENAME)
    if not path.exists():
        _LOGGER.info("Config file %s not found, using defaults", path)
        return CryptoDefaults()

    try:
        with open(path, "r", encoding="utf-8") as f:
            user_config = json.load(f)
    except json.JSONDecodeError as e:
        _LOGGER.warning(
            "Cannot parse %s: invalid JSON at line %d, column %d; using defaults",
            path,
            e.lineno,
            e.colno,
        )
        return CryptoDefaults()
    except OSError as e:
        _LOGGER.warning("Cannot read %s: %s; using defaults", path, e)
        return CryptoDefaults()

    if not isinstance(user_config, dict):
        _LOGGER.warning(
            "Config file %s must contain a JSON object, got %s; using defaults",
            path,
            type(user_config).__name__,
        )
        return CryptoDefaults()

    known = {f.name for f in fields(CryptoDefaults)}
    unknown = sorted(set(user_config) - known)
    if unknown:
        _LOGGER.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

    merged = CryptoDefaults().to_dict()
    merged.update({k: v for k, v in user_config.items() if k in known})
    config = CryptoDefaults(**merged)
    _LOGGER.info("Configuration loaded from %s", path)
    return config


__all__ = [
    "AESMode",
    "RSAKeySize",
    "OTPKeySize",
    "AES_KEY_BITS",
    "CryptoDefaults",
    "load_config",
]
