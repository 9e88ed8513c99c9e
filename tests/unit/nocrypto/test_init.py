"""
Модульные тесты для nocrypto/__init__.py: публичный API и настройка логирования.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator

import pytest

import nocrypto


class TestPublicApi:
    def test_version_format(self) -> None:
        assert re.match(r"^\d+\.\d+\.\d+$", nocrypto.__version__)

    def test_all_names_resolve(self) -> None:
        for name in nocrypto.__all__:
            assert hasattr(nocrypto, name), name

    def test_quickstart(self) -> None:
        aes = nocrypto.AesGcmCipher()
        key = aes.generate_key_text()
        assert aes.decrypt(aes.encrypt(b"payload", key), key) == b"payload"
        assert isinstance(nocrypto.get_symmetric_cipher("cbc_pkcs7"), nocrypto.AesCipher)


class TestLogging:
    @pytest.fixture(autouse=True)
    def _restore_logger(self) -> Iterator[None]:
        logger = logging.getLogger(nocrypto.LOGGER_NAME)
        handlers, level = list(logger.handlers), logger.level
        yield
        logger.handlers[:] = handlers
        logger.setLevel(level)

    def test_null_handler_installed(self) -> None:
        logger = logging.getLogger("nocrypto")
        assert any(isinstance(h, logging.NullHandler) for h in logger.handlers)

    def test_configure_logging_idempotent(self) -> None:
        logger = nocrypto.configure_logging("DEBUG")
        n = len(logger.handlers)
        assert logger.level == logging.DEBUG
        nocrypto.configure_logging(logging.ERROR)
        assert len(logger.handlers) == n
        assert logger.level == logging.ERROR

    def test_configure_logging_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NOCRYPTO_LOG_LEVEL", "info")
        assert nocrypto.configure_logging().level == logging.INFO
        monkeypatch.setenv("NOCRYPTO_LOG_LEVEL", "bogus")
        assert nocrypto.configure_logging().level == logging.WARNING
