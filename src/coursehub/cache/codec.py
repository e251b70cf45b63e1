"""JSON codec for cached domain values.

Values are pydantic models dumped in JSON mode and serialized with orjson.
Keeping the codec behind its own class lets the cache layer stay unaware of
the wire format.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Generic, TypeVar

import orjson
from pydantic import BaseModel, TypeAdapter, ValidationError

from coursehub.cache.errors import CodecError

M = TypeVar("M", bound=BaseModel)


class ModelCodec(Generic[M]):
    """Encode/decode a pydantic model (or a list of them) to JSON bytes."""

    def __init__(self, model: type[M]):
        self.model = model
        self._list_adapter: TypeAdapter[list[M]] = TypeAdapter(list[model])  # type: ignore[valid-type]

    def encode(self, value: M) -> bytes:
        try:
            return orjson.dumps(value.model_dump(mode="json"))
        except (TypeError, ValueError) as e:
            raise CodecError(f"Cannot encode {self.model.__name__}: {e}") from e

    def decode(self, data: bytes) -> M:
        try:
            return self.model.model_validate(orjson.loads(data))
        except (orjson.JSONDecodeError, ValidationError, TypeError) as e:
            raise CodecError(f"Cannot decode {self.model.__name__}: {e}") from e

    def encode_many(self, values: Sequence[M]) -> bytes:
        try:
            return orjson.dumps([value.model_dump(mode="json") for value in values])
        except (TypeError, ValueError) as e:
            raise CodecError(f"Cannot encode list of {self.model.__name__}: {e}") from e

    def decode_many(self, data: bytes) -> list[M]:
        try:
            return self._list_adapter.validate_python(orjson.loads(data))
        except (orjson.JSONDecodeError, ValidationError, TypeError) as e:
            raise CodecError(f"Cannot decode list of {self.model.__name__}: {e}") from e
