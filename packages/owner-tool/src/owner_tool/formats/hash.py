# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Typed digests and MACs as carried in FDO artifacts: [hash_type, value]."""

from dataclasses import dataclass
from typing import Any

from ..constants import HashType
from ..crypto.hashing import compute_digest, compute_hmac
from ..errors import ArtifactDecodeError
from .codec import expect_array, expect_type


@dataclass(frozen=True)
class Hash:
    """A digest tagged with its algorithm."""

    hash_type: HashType
    value: bytes

    @classmethod
    def new(cls, hash_type: HashType, data: bytes) -> "Hash":
        """Digest data with hash_type."""
        return cls(hash_type, compute_digest(hash_type, data))

    @classmethod
    def empty(cls, hash_type: HashType = HashType.SHA384) -> "Hash":
        """Placeholder meaning "no digest recorded yet"."""
        return cls(hash_type, b"")

    @property
    def is_empty(self) -> bool:
        return len(self.value) == 0

    def matches(self, data: bytes) -> bool:
        """Check whether this hash was computed over data."""
        return not self.is_empty and Hash.new(self.hash_type, data) == self

    def to_cbor(self) -> list:
        return [int(self.hash_type), self.value]

    @classmethod
    def from_cbor(cls, value: Any, what: str = "hash") -> "Hash":
        hash_type, digest = expect_array(value, 2, what)
        expect_type(hash_type, int, f"{what} type")
        expect_type(digest, bytes, f"{what} value")
        try:
            hash_type = HashType(hash_type)
        except ValueError as e:
            raise ArtifactDecodeError(f"Invalid {what}: unknown hash type {hash_type}") from e
        return cls(hash_type, digest)

    def __str__(self) -> str:
        if self.is_empty:
            return f"{self.hash_type.name.lower()}:<empty>"
        return f"{self.hash_type.name.lower()}:{self.value.hex()}"


@dataclass(frozen=True)
class HMac(Hash):
    """An HMAC tagged with its algorithm."""

    @classmethod
    def compute(cls, hash_type: HashType, key: bytes, data: bytes) -> "HMac":
        return cls(hash_type, compute_hmac(hash_type, key, data))
