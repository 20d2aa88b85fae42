from __future__ import annotations

from typing import Any, Sequence

import numpy as np
from sqlalchemy import LargeBinary
from sqlalchemy.types import TypeDecorator

# Little-endian float32, independent of the host byte order.
VECTOR_DTYPE = np.dtype("<f4")


def pack_vector(vector: Sequence[float]) -> bytes:
    """Encode a vector as packed little-endian float32."""

    return np.asarray(vector, dtype=VECTOR_DTYPE).tobytes()


def unpack_vector(blob: bytes) -> list[float]:
    """Decode a packed float32 blob back into a list of floats."""

    if len(blob) % VECTOR_DTYPE.itemsize:
        raise ValueError(f"Packed vector length {len(blob)} is not a multiple of 4")
    return np.frombuffer(blob, dtype=VECTOR_DTYPE).astype(float).tolist()


class PackedVector(TypeDecorator):
    """
    Fixed-width binary column for embedding vectors.

    Stores list[float] as packed float32 so that reading a vector back
    does not require JSON parsing. Works on every dialect via LargeBinary.
    """

    impl = LargeBinary
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> Any:
        if value is None:
            return None
        return pack_vector(value)

    def process_result_value(self, value: Any, dialect) -> Any:
        if value is None:
            return None
        return unpack_vector(bytes(value))
