# -*- coding: utf-8 -*-
"""
RU: Протоколы (DI-контракты) для внешних зависимостей библиотеки: источник
случайных байт, кодек объектов, генераторы OTP-секрета и API-ключа.

EN: Dependency-injection Protocols for the collaborators the codecs rely on:
secure random source, structured object codec, OTP seed and API key generators.

Design notes:
- Protocols are @runtime_checkable to allow isinstance checks in tests.
- Implementations signal failure by raising; there are no status return codes.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class SecureRandomSource(Protocol):
    """Cryptographically secure random byte source."""

    def fill(self, length: int) -> bytes:
        """
        Return exactly ``length`` random bytes.

        Raises:
            Exception: any failure of the underlying source.
        """
        ...


@runtime_checkable
class ObjectCodec(Protocol):
    """Structured object <-> bytes codec used by the object-level cipher operations."""

    def encode(self, obj: Any) -> bytes:
        """Serialize an object to bytes."""
        ...

    def decode(self, data: bytes, target_type: Optional[type] = None) -> Any:
        """Deserialize bytes, optionally into ``target_type``."""
        ...


@runtime_checkable
class OtpSeedGenerator(Protocol):
    """Generator of one-time-password seeds (base32 text)."""

    def generate(self, size: int) -> str: ...


@runtime_checkable
class RandomStringGenerator(Protocol):
    """Generator of random API key strings."""

    def generate(self, length: int) -> str: ...


__all__ = [
    "SecureRandomSource",
    "ObjectCodec",
    "OtpSeedGenerator",
    "RandomStringGenerator",
]
