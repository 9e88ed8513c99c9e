# -*- coding: utf-8 -*-
"""
Default structured-object codec for encrypt_object/decrypt_object.

JSON (UTF-8) with dataclass support: dataclass instances are encoded through
``dataclasses.asdict`` and decoding into a dataclass type passes the decoded
object's fields as keyword arguments. All failures surface as SerializationError.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from typing import Any, Final, Optional

from nocrypto.exceptions import SerializationError

_LOGGER: Final = logging.getLogger(__name__)


class JsonCodec:
    """
    JSON codec implementing the ObjectCodec protocol.

    Example:
        >>> codec = JsonCodec()
        >>> codec.decode(codec.encode({"a": 1}))
        {'a': 1}
    """

    __slots__ = ("sort_keys",)

    def __init__(self, *, sort_keys: bool = False) -> None:
        self.sort_keys = sort_keys

    def encode(self, obj: Any) -> bytes:
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            obj = dataclasses.asdict(obj)
        try:
            text = json.dumps(
                obj, ensure_ascii=False, separators=(",", ":"), sort_keys=self.sort_keys
            )
        except (TypeError, ValueError) as exc:
            _LOGGER.error("JSON encode failed: %s", exc.__class__.__name__)
            raise SerializationError(
                f"Object of type {type(obj).__name__} is not JSON serializable"
            ) from exc
        return text.encode("utf-8")

    def decode(self, data: bytes, target_type: Optional[type] = None) -> Any:
        try:
            obj = json.loads(bytes(data).decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            _LOGGER.error("JSON decode failed: %s", exc.__class__.__name__)
            raise SerializationError("Payload is not valid UTF-8 JSON") from exc

        if target_type is None:
            return obj
        if dataclasses.is_dataclass(target_type):
            if not isinstance(obj, dict):
                raise SerializationError(
                    f"Expected JSON object for {target_type.__name__}"
                )
            try:
                return target_type(**obj)
            except TypeError as exc:
                raise SerializationError(
                    f"JSON object does not match {target_type.__name__}"
                ) from exc
        if not isinstance(obj, target_type):
            raise SerializationError(
                f"Expected {target_type.__name__}, got {type(obj).__name__}"
            )
        return obj


__all__ = ["JsonCodec"]
