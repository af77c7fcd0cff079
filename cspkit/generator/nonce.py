"""Nonce generation over a pluggable randomness source."""

from __future__ import annotations

import base64
import os
import random
from collections.abc import Callable
from typing import Literal, Protocol

import structlog

logger = structlog.get_logger()

NonceEncoding = Literal["base64", "hex"]

INSECURE_NONCE_WARNING = (
    "No secure random number generator available; nonce was generated with an insecure fallback"
)

_HEX_ALPHABET = "0123456789abcdef"
_BASE64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"


class RandomSource(Protocol):
    """Fills buffers with random bytes. ``secure`` marks a CSPRNG."""

    secure: bool

    def fill(self, buffer: bytearray) -> None: ...


class SystemRandomSource:
    """OS CSPRNG via ``os.urandom``."""

    secure = True

    def fill(self, buffer: bytearray) -> None:
        buffer[:] = os.urandom(len(buffer))


class PseudoRandomSource:
    """Mersenne Twister bytes. Not suitable for nonces in production."""

    secure = False

    def __init__(self, seed: int | None = None) -> None:
        self._random = random.Random(seed)

    def fill(self, buffer: bytearray) -> None:
        buffer[:] = self._random.randbytes(len(buffer))


_default_source: RandomSource | None = None


def default_random_source() -> RandomSource:
    """Pick the process-wide source once: OS CSPRNG if usable, else pseudo-random."""
    global _default_source
    if _default_source is None:
        try:
            os.urandom(1)
            _default_source = SystemRandomSource()
        except NotImplementedError:
            logger.warning("secure_random_unavailable")
            _default_source = PseudoRandomSource()
    return _default_source


def set_default_random_source(source: RandomSource | None) -> None:
    """Override the process-wide source. ``None`` re-runs detection on next use."""
    global _default_source
    _default_source = source


def _encoded_length(length: int, encoding: NonceEncoding) -> int:
    if encoding == "hex":
        return length * 2
    return 4 * ((length + 2) // 3)


def generate_nonce(
    length: int = 16,
    encoding: NonceEncoding = "base64",
    *,
    source: RandomSource | None = None,
    on_insecure: Callable[[str], None] | None = None,
) -> str:
    """Generate a nonce of ``length`` random bytes encoded as base64 or hex.

    With a secure source the bytes are encoded directly (lowercase hex, or
    standard base64 with padding). With an insecure source, characters are
    sampled from the encoding alphabet to the same output length, a warning
    is logged and ``on_insecure`` is called with INSECURE_NONCE_WARNING.
    """
    if length <= 0:
        raise ValueError(f"nonce length must be positive, got {length}")
    if encoding not in ("base64", "hex"):
        raise ValueError(f"unsupported nonce encoding: {encoding!r}")

    source = source or default_random_source()

    if source.secure:
        buffer = bytearray(length)
        source.fill(buffer)
        if encoding == "hex":
            return buffer.hex()
        return base64.b64encode(bytes(buffer)).decode("ascii")

    alphabet = _HEX_ALPHABET if encoding == "hex" else _BASE64_ALPHABET
    buffer = bytearray(_encoded_length(length, encoding))
    source.fill(buffer)
    nonce = "".join(alphabet[b % len(alphabet)] for b in buffer)

    logger.warning("insecure_nonce_fallback", length=length, encoding=encoding)
    if on_insecure is not None:
        on_insecure(INSECURE_NONCE_WARNING)
    return nonce
