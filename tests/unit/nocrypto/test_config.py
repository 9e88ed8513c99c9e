"""
Unit-тесты для модуля config.py: значения по умолчанию, валидация, загрузка из JSON.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from nocrypto.config import (
    AESMode,
    CryptoDefaults,
    OTPKeySize,
    RSAKeySize,
    load_config,
)


class TestCryptoDefaults:
    """Значения по умолчанию и валидация."""

    def test_defaults(self) -> None:
        d = CryptoDefaults()
        assert d.aes_mode is AESMode.GCM
        assert d.aes_key_bits == 256
        assert d.rsa_key_size is RSAKeySize.KEY_2048
        assert d.otp_key_size is OTPKeySize.KEY_40
        assert d.api_key_length == 40
        assert d.otp_interval == 30
        assert d.otp_valid_window == 1

    def test_enum_fields_are_coerced(self) -> None:
        d = CryptoDefaults(aes_mode="cbc_pkcs7", rsa_key_size=1024, otp_key_size=32)  # type: ignore[arg-type]
        assert d.aes_mode is AESMode.CBC_PKCS7
        assert d.rsa_key_size is RSAKeySize.KEY_1024
        assert d.otp_key_size is OTPKeySize.KEY_32

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"aes_key_bits": 512},
            {"rsa_key_size": 3072},
            {"otp_key_size": 16},
            {"aes_mode": "ecb"},
            {"api_key_length": 8},
            {"otp_interval": 0},
            {"otp_valid_window": -1},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            CryptoDefaults(**kwargs)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"aes_key_bits": "256"},
            {"aes_key_bits": 256.0},
            {"rsa_key_size": 2048.5},
            {"otp_key_size": "40"},
            {"api_key_length": "40"},
            {"api_key_length": None},
            {"otp_interval": True},
            {"otp_interval": 30.5},
            {"otp_valid_window": [1]},
        ],
    )
    def test_wrong_types_raise_value_error(self, kwargs: dict) -> None:
        with pytest.raises(ValueError, match="must be an integer"):
            CryptoDefaults(**kwargs)

    def test_to_dict_is_json_ready(self) -> None:
        data = CryptoDefaults(rsa_key_size=4096).to_dict()  # type: ignore[arg-type]
        assert data["rsa_key_size"] == 4096 and type(data["rsa_key_size"]) is int
        assert data["aes_mode"] == "gcm"
        assert CryptoDefaults(**json.loads(json.dumps(data))) == CryptoDefaults(
            rsa_key_size=RSAKeySize.KEY_4096
        )

    def test_frozen(self) -> None:
        with pytest.raises(Exception):
            CryptoDefaults().aes_key_bits = 128  # type: ignore[misc]


class TestLoadConfig:
    """Загрузка конфигурации из файла."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "absent.json") == CryptoDefaults()

    def test_default_path_in_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        (tmp_path / "nocrypto.json").write_text('{"api_key_length": 64}', encoding="utf-8")
        assert load_config().api_key_length == 64

    def test_merges_over_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.json"
        path.write_text(
            json.dumps({"rsa_key_size": 1024, "aes_mode": "cbc_pkcs7"}), encoding="utf-8"
        )
        cfg = load_config(str(path))
        assert cfg.rsa_key_size is RSAKeySize.KEY_1024
        assert cfg.aes_mode is AESMode.CBC_PKCS7
        assert cfg.api_key_length == 40

    def test_invalid_json_gives_defaults(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "cfg.json"
        path.write_text("{not json", encoding="utf-8")
        caplog.set_level(logging.WARNING, logger="nocrypto")
        assert load_config(path) == CryptoDefaults()
        assert any("invalid JSON" in r.getMessage() for r in caplog.records)

    def test_non_object_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_config(path) == CryptoDefaults()

    def test_unknown_keys_ignored(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "cfg.json"
        path.write_text('{"printer": "lp0", "otp_interval": 60}', encoding="utf-8")
        caplog.set_level(logging.WARNING, logger="nocrypto")
        cfg = load_config(path)
        assert cfg.otp_interval == 60
        assert any("printer" in r.getMessage() for r in caplog.records)

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg.json"
        path.write_text('{"rsa_key_size": 512}', encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)

    @pytest.mark.parametrize(
        "payload",
        ['{"api_key_length": "40"}', '{"otp_interval": "60"}', '{"aes_key_bits": null}'],
    )
    def test_wrong_typed_value_raises_value_error(
        self, tmp_path: Path, payload: str
    ) -> None:
        path = tmp_path / "cfg.json"
        path.write_text(payload, encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)
