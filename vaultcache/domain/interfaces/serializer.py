"""Interface for payload codecs.

The cache stores and returns byte sequences; a serializer decides how
caller values become those bytes.
"""

import abc
from typing import Any


class PayloadSerializer(abc.ABC):
    """Abstract Base Class for turning cached values into bytes and back."""

    @abc.abstractmethod
    def dumps(self, value: Any) -> bytes:
        """Encodes a value.

        Raises:
            PayloadEncodeError: If the value cannot be encoded.
        """
        pass

    @abc.abstractmethod
    def loads(self, data: bytes) -> Any:
        """Decodes bytes produced by dumps.

        Raises:
            PayloadDecodeError: If the bytes are not a valid encoding.
        """
        pass
