# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Device GUID: 128 random bits assigned at provisioning time."""

import uuid
from dataclasses import dataclass
from typing import Any

from ..randomness import RandomSource
from .codec import expect_type
from ..errors import ArtifactDecodeError

GUID_LENGTH = 16


@dataclass(frozen=True)
class Guid:
    value: bytes

    def __post_init__(self):
        if len(self.value) != GUID_LENGTH:
            raise ValueError(f"GUID must be {GUID_LENGTH} bytes, got {len(self.value)}")

    @classmethod
    def new(cls, rng: RandomSource) -> "Guid":
        return cls(rng.token_bytes(GUID_LENGTH))

    def as_uuid(self) -> uuid.UUID:
        return uuid.UUID(bytes=self.value)

    def to_cbor(self) -> bytes:
        return self.value

    @classmethod
    def from_cbor(cls, value: Any) -> "Guid":
        expect_type(value, bytes, "GUID")
        if len(value) != GUID_LENGTH:
            raise ArtifactDecodeError(f"Invalid GUID: expected {GUID_LENGTH} bytes, got {len(value)}")
        return cls(value)

    def __str__(self) -> str:
        return str(self.as_uuid())
