# -*- coding: utf-8 -*-
from __future__ import annotations

import os
from typing import Any, Optional

import pytest

from nocrypto import utils as U
from nocrypto.protocols import SecureRandomSource


def test_generate_random_bytes_basic_and_bounds() -> None:
    out = U.generate_random_bytes(32)
    assert isinstance(out, bytes) and len(out) == 32
    assert out != U.generate_random_bytes(32)
    for bad in (0, -1, 2 * 1024 * 1024):
        with pytest.raises(ValueError):
            U.generate_random_bytes(bad)
    with pytest.raises(ValueError):
        U.generate_random_bytes(True)  # type: ignore[arg-type]


def test_generate_random_bytes_small_sizes() -> None:
    for n in (1, 2, 7, 12):
        assert len(U.generate_random_bytes(n)) == n


def test_degenerate_output_rejected() -> None:
    with pytest.raises(ValueError):
        U._rct_apt_checks(b"\x00" * 16)  # type: ignore[attr-defined]
    with pytest.raises(ValueError):
        U._rct_apt_checks(b"\x01" * 30 + b"\x02" * 2)  # type: ignore[attr-defined]
    with pytest.raises(ValueError):
        U._rct_apt_checks(b"")  # type: ignore[attr-defined]
    U._rct_apt_checks(os.urandom(64))  # type: ignore[attr-defined]


def test_degenerate_hkdf_output_propagates(monkeypatch: pytest.MonkeyPatch) -> None:
    class StuckHKDF:
        def __init__(self, **kwargs: Any) -> None:
            self.length = kwargs["length"]

        def derive(self, ikm: bytes) -> bytes:
            return b"\x00" * self.length

    monkeypatch.setattr(U, "HKDF", StuckHKDF)
    with pytest.raises(ValueError):
        U.generate_random_bytes(32)


def test_system_random_source() -> None:
    src = U.SystemRandomSource()
    assert isinstance(src, SecureRandomSource)
    assert len(src.fill(24)) == 24
    assert src.fill(16) != src.fill(16)


def test_zero_memory_wipes_bytearray() -> None:
    buf = bytearray(b"supersecret")
    U.zero_memory(buf)
    assert all(b == 0 for b in buf)
    buf2: Optional[bytearray] = None
    U.zero_memory(buf2)
    U.zero_memory(b"immutable")  # type: ignore[arg-type]


def test_b64_codec() -> None:
    data = os.urandom(33)
    text = U.b64_encode(data)
    assert "\n" not in text
    assert U.b64_decode(text) == data
    assert U.b64_encode(bytearray(b"ab")) == "YWI="
    for bad in ("YWI", "Y W I =", "ÿÿ", "a-b_"):
        with pytest.raises(ValueError):
            U.b64_decode(bad)
    with pytest.raises(ValueError):
        U.b64_decode(b"YWI=")  # type: ignore[arg-type]


def test_validate_key_length() -> None:
    U.validate_key_length(b"k" * 16, (16, 32))
    U.validate_key_length(bytearray(32), (16, 32))
    with pytest.raises(ValueError):
        U.validate_key_length(b"k" * 20, (16, 32))
    with pytest.raises(ValueError):
        U.validate_key_length("k" * 16, (16, 32))  # type: ignore[arg-type]
