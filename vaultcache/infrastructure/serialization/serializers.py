"""Payload serializers.

PickleSerializer is the default and round-trips arbitrary Python objects.
JsonSerializer is restricted to JSON types but produces bytes any language
can read. Only unpickle data you wrote yourself: an encrypted cache protects
pickled payloads with the key, an unencrypted one relies on file permissions.
"""

import json
import logging
import pickle
from typing import Any

from vaultcache.domain.exceptions import PayloadDecodeError, PayloadEncodeError
from vaultcache.domain.interfaces.serializer import PayloadSerializer

logger = logging.getLogger(__name__)


class PickleSerializer(PayloadSerializer):
    """Serializes values with pickle."""

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL):
        self.protocol = protocol

    def dumps(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=self.protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise PayloadEncodeError(f"Value of type {type(value).__name__} cannot be pickled: {e}") from e

    def loads(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)
        except (pickle.UnpicklingError, EOFError, ValueError, TypeError,
                AttributeError, ImportError, IndexError) as e:
            raise PayloadDecodeError(f"Failed to unpickle cached payload: {e}") from e


class JsonSerializer(PayloadSerializer):
    """Serializes JSON-compatible values as UTF-8 encoded JSON."""

    def dumps(self, value: Any) -> bytes:
        try:
            return json.dumps(value, ensure_ascii=False, separators=(',', ':')).encode('utf-8')
        except (TypeError, ValueError) as e:
            raise PayloadEncodeError(f"Value is not JSON serializable: {e}") from e

    def loads(self, data: bytes) -> Any:
        try:
            return json.loads(data.decode('utf-8'))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise PayloadDecodeError(f"Failed to decode JSON payload: {e}") from e
