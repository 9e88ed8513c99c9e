# -*- coding: utf-8 -*-
"""
RU: Криптографические утилиты: источник случайных байт с HKDF‑микшированием и
проверками качества, кодек Base64 для текстового представления ключей,
проверка длины ключей и best‑effort зануление буферов.

EN: Crypto utilities: a secure random source mixing two OS entropy sources via HKDF
with output sanity checks, the base64 codec used for key text, key length
validation and best-effort zeroization of mutable buffers.
"""
from __future__ import annotations

import base64
import logging
import os
import secrets
from collections import Counter
from typing import Final, Optional, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

_LOGGER: Final = logging.getLogger(__name__)

_MAX_RANDOM_BYTES: Final[int] = 1024 * 1024
_DEGENERATE_MIN_N: Final[int] = 8
_SMALL_APT_MIN_N: Final[int] = 32
_HKDF_INFO: Final[bytes] = b"NOCRYPTO-RNG-v1"

BytesLike = Union[bytes, bytearray]


def generate_random_bytes(n: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Uses dual-source XOR (os.urandom + secrets.token_bytes) mixed via HKDF-SHA256.

    Args:
        n: number of bytes to generate (1..1MiB).

    Returns:
        Random bytes of requested length.

    Raises:
        ValueError: if n is out of range or the output fails sanity checks.
    """
    if not isinstance(n, int) or isinstance(n, bool) or n <= 0 or n > _MAX_RANDOM_BYTES:
        raise ValueError("Requested random size must be in 1..1MiB")

    src1 = os.urandom(n)
    src2 = secrets.token_bytes(n)
    ikm = bytes(a ^ b for a, b in zip(src1, src2))
    salt = src2[:16]
    out = HKDF(
        algorithm=hashes.SHA256(), length=n, salt=salt, info=_HKDF_INFO
    ).derive(ikm)

    _rct_apt_checks(out)
    _LOGGER.debug("Generated %d random bytes", n)
    return out


def _rct_apt_checks(data: bytes) -> None:
    """
    Repetition count and adaptive proportion sanity checks.

    Raises:
        ValueError: if data looks degenerate.
    """
    if not data:
        raise ValueError("Empty data for entropy checks")
    if len(data) >= _DEGENERATE_MIN_N and all(b == data[0] for b in data):
        raise ValueError("Degenerate RNG output (all bytes equal)")
    if len(data) >= _SMALL_APT_MIN_N:
        freq: Counter[int] = Counter(data)
        if max(freq.values()) / float(len(data)) > 0.80:
            raise ValueError("RNG output fails adaptive proportion sanity check")


class SystemRandomSource:
    """
    Default SecureRandomSource backed by the operating system CSPRNG.

    Stateless; safe to share between threads as far as the OS source is.

    Example:
        >>> len(SystemRandomSource().fill(32))
        32
    """

    __slots__ = ()

    def fill(self, length: int) -> bytes:
        return generate_random_bytes(length)


def zero_memory(buf: Optional[bytearray]) -> None:
    """
    Best-effort zeroization of a mutable buffer.

    Only bytearray can be wiped; bytes objects are immutable and are left to the GC.
    """
    if buf is None:
        return
    try:
        for i in range(len(buf)):
            buf[i] = 0
    except (TypeError, AttributeError) as e:
        _LOGGER.debug("zero_memory skip (immutable): %s", e.__class__.__name__)


def b64_encode(data: BytesLike) -> str:
    """
    Encode bytes to a standard-alphabet base64 string (no newlines, padding kept).
    """
    return base64.b64encode(bytes(data)).decode("ascii")


def b64_decode(text: str) -> bytes:
    """
    Decode a standard-alphabet base64 string.

    Raises:
        ValueError: on non-ASCII input or invalid base64.
    """
    if not isinstance(text, str):
        raise ValueError("base64 text must be str")
    return base64.b64decode(text.encode("ascii"), validate=True)


def validate_key_length(
    key: BytesLike, allowed: tuple[int, ...], name: str = "key"
) -> None:
    """
    Validate that a key length (in bytes) is one of the allowed sizes.

    Raises:
        ValueError: on non-bytes input or length mismatch.
    """
    if not isinstance(key, (bytes, bytearray)):
        raise ValueError(f"{name} must be bytes")
    if len(key) not in allowed:
        raise ValueError(
            f"Invalid {name} length: {len(key)} bytes, expected one of {allowed}"
        )


__all__ = [
    "BytesLike",
    "generate_random_bytes",
    "SystemRandomSource",
    "zero_memory",
    "b64_encode",
    "b64_decode",
    "validate_key_length",
]
