# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Random byte providers.

Everything that needs randomness (device keys, certificate serials, GUIDs,
HMAC secrets) takes a RandomSource, so tests can swap in a seeded one.
"""

import random
import secrets
from typing import Protocol


class RandomSource(Protocol):
    """Anything that can hand out random bytes."""

    def token_bytes(self, length: int) -> bytes:
        ...


class SystemRandomSource:
    """Cryptographically secure randomness from the operating system."""

    def token_bytes(self, length: int) -> bytes:
        return secrets.token_bytes(length)


class DeterministicRandomSource:
    """
    Reproducible byte stream for tests.

    NOT suitable for provisioning real devices.

    Example:
        >>> a = DeterministicRandomSource(7).token_bytes(4)
        >>> b = DeterministicRandomSource(7).token_bytes(4)
        >>> a == b
        True
    """

    def __init__(self, seed: int):
        self._random = random.Random(seed)

    def token_bytes(self, length: int) -> bytes:
        return self._random.randbytes(length)


def default_random_source() -> RandomSource:
    return SystemRandomSource()
