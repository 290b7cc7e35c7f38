# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""CBOR encode/decode wrappers with owner-tool error reporting."""

from typing import Any

import cbor2

from ..errors import ArtifactDecodeError


def encode(value: Any) -> bytes:
    return cbor2.dumps(value)


def decode(data: bytes, what: str) -> Any:
    """
    Decode one CBOR item.

    Raises:
        ArtifactDecodeError: If data is not valid CBOR
    """
    try:
        return cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError, TypeError, EOFError) as e:
        raise ArtifactDecodeError(f"Error decoding {what}: {e}") from e


def expect_array(value: Any, length: int, what: str) -> list:
    """
    Check that a decoded value is an array of the given length.

    cbor2 may decode arrays as tuples (inside tags, for instance), so both
    are accepted and a list is returned.
    """
    if not isinstance(value, (list, tuple)) or len(value) != length:
        raise ArtifactDecodeError(f"Invalid {what}: expected an array of {length} elements")
    return list(value)


def expect_type(value: Any, expected, what: str):
    # bool is an int subclass, never accept it where an int is expected
    if isinstance(value, bool) and expected is not bool:
        raise ArtifactDecodeError(f"Invalid {what}: unexpected boolean")
    if expected is list and isinstance(value, tuple):
        return list(value)
    if not isinstance(value, expected):
        raise ArtifactDecodeError(f"Invalid {what}: unexpected {type(value).__name__}")
    return value
