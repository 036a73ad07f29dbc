"""
PBKDF2-SHA512 Configuration Resolver

This module turns a loosely-typed, possibly hostile configuration into a
concrete, bounded set of derivation parameters. Resolution never fails:
every missing or invalid field falls back to its default, and every
replacement of a provided value is reported through the module logger
at WARNING level.

Accepted input shapes per field:
- encoding: one of ``ENCODINGS`` (default "base64")
- salt: a byte count (int), bytes, bytearray/memoryview, or text decoded
  with the resolved encoding. Anything that does not end up as at least
  ``SALT_MIN_LENGTH`` bytes is replaced by ``SALT_DEFAULT_LENGTH`` fresh
  random bytes.
- iterations: a number, floored, at least ``ITERATIONS_MIN``
  (``ITERATIONS_RELAXED_MIN`` when ``relaxed`` is True)
- length: a number in [``LENGTH_MIN``, ``LENGTH_MAX``], floored
- relaxed: True to lower the iteration minimum

Example Usage:
    >>> import os
    >>> from pbkdf2sha512.config import resolve_spec
    >>> spec = resolve_spec({"iterations": 16384, "length": 48}, os.urandom)
    >>> spec.iterations, spec.length, spec.encoding
    (16384, 48, 'base64')
"""

import math
import logging
from typing import Any, Mapping, Optional
from dataclasses import dataclass

from .encoding import ENCODINGS, RAW, to_bytes, to_text
from .engine import RandomBytesFn

logger = logging.getLogger(__name__)

SALT_DEFAULT_LENGTH = 64
SALT_MIN_LENGTH = 32

ITERATIONS_DEFAULT = 65536
ITERATIONS_MIN = 8192
ITERATIONS_RELAXED_MIN = 1

# SHA-512 output size bounds the derived key length
LENGTH_DEFAULT = 64
LENGTH_MIN = 32
LENGTH_MAX = 64

HMAC = "sha512"


@dataclass(frozen=True)
class SaltSpec:
    """
    Resolved salt.

    Attributes:
        raw: Salt bytes fed to the derivation
        chars: Text rendering in the resolved encoding, None for "none"
    """
    raw: bytes
    chars: Optional[str] = None


@dataclass(frozen=True)
class DerivationSpec:
    """Concrete, validated derivation parameters."""
    encoding: str
    salt: SaltSpec
    iterations: int
    length: int
    hmac: str = HMAC


def _is_number(val: Any) -> bool:
    if isinstance(val, bool):
        return False
    if isinstance(val, int):
        return True
    return isinstance(val, float) and math.isfinite(val)


def _report_default(field: str, val: Any, default: Any) -> None:
    if val is None:
        logger.debug(f"No {field} configured, using default {default}")
    else:
        logger.warning(f"Invalid {field} {val!r}, using default {default}")


def as_mapping(config: Any) -> Mapping[str, Any]:
    """Return ``config`` if it is a mapping, else an empty one."""
    if config is None:
        return {}
    if isinstance(config, Mapping):
        return config
    logger.warning(f"Ignoring configuration of type {type(config).__name__}, using defaults")
    return {}


def resolve_encoding(val: Any) -> str:
    """Return ``val`` if it is a supported encoding name, else "base64"."""
    if isinstance(val, str) and val in ENCODINGS:
        return val
    _report_default("encoding", val, ENCODINGS[0])
    return ENCODINGS[0]


def _to_random_bytes_if_number(random_bytes_fn: RandomBytesFn, val: Any) -> Any:
    if not _is_number(val):
        return val
    if isinstance(val, float) and not val.is_integer():
        raise ValueError(f"salt length must be integral, got {val}")
    return random_bytes_fn(int(val))


def _to_bytes_if_view(val: Any) -> Any:
    if isinstance(val, (bytearray, memoryview)):
        return bytes(val)
    return val


def _to_bytes_if_text(val: Any, encoding: str) -> Any:
    if encoding != RAW and isinstance(val, str):
        return to_bytes(val, encoding)
    return val


def resolve_salt(val: Any, encoding: str, random_bytes_fn: RandomBytesFn) -> bytes:
    """
    Coerce a configured salt into bytes.

    Args:
        val: Byte count, bytes, byte view, text, or None
        encoding: Resolved encoding, used to decode text salts
        random_bytes_fn: Random source for generated salts

    Returns:
        At least ``SALT_MIN_LENGTH`` salt bytes
    """
    if val is not None:
        try:
            salt = _to_bytes_if_text(_to_bytes_if_view(_to_random_bytes_if_number(random_bytes_fn, val)), encoding)
        except Exception as e:
            logger.warning(f"Salt coercion failed: {e}")
            salt = None

        if isinstance(salt, bytes) and len(salt) >= SALT_MIN_LENGTH:
            return salt

        if isinstance(salt, bytes):
            logger.warning(
                f"Salt of {len(salt)} bytes is shorter than {SALT_MIN_LENGTH}, "
                f"generating {SALT_DEFAULT_LENGTH} random bytes"
            )
        else:
            _report_default("salt", val, f"of {SALT_DEFAULT_LENGTH} random bytes")

    return bytes(random_bytes_fn(SALT_DEFAULT_LENGTH))


def resolve_iterations(val: Any, relaxed: Any = False) -> int:
    """Return the floored iteration count, or 65536 if below the minimum."""
    minimum = ITERATIONS_RELAXED_MIN if relaxed is True else ITERATIONS_MIN
    if _is_number(val):
        iterations = math.floor(val)
        if iterations >= minimum:
            return iterations
    _report_default("iterations", val, ITERATIONS_DEFAULT)
    return ITERATIONS_DEFAULT


def resolve_length(val: Any) -> int:
    """Return the floored key length if within [32, 64], else 64."""
    if _is_number(val) and LENGTH_MIN <= val <= LENGTH_MAX:
        return math.floor(val)
    _report_default("length", val, LENGTH_DEFAULT)
    return LENGTH_DEFAULT


def resolve_spec(config: Any, random_bytes_fn: RandomBytesFn) -> DerivationSpec:
    """
    Resolve a raw configuration into a ``DerivationSpec``.

    The encoding is resolved first since salt decoding depends on it.

    Args:
        config: Mapping with optional ``encoding``, ``salt``, ``iterations``,
            ``length`` and ``relaxed`` keys. Other values count as empty.
        random_bytes_fn: Random source for generated salts

    Returns:
        A fully populated ``DerivationSpec``
    """
    config = as_mapping(config)
    encoding = resolve_encoding(config.get("encoding"))
    salt = resolve_salt(config.get("salt"), encoding, random_bytes_fn)
    return DerivationSpec(
        encoding=encoding,
        salt=SaltSpec(raw=salt, chars=None if encoding == RAW else to_text(salt, encoding)),
        iterations=resolve_iterations(config.get("iterations"), config.get("relaxed")),
        length=resolve_length(config.get("length")),
    )
