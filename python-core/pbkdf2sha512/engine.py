"""
PBKDF2-SHA512 Engine - Platform Primitives Module.

This module provides the two platform collaborators the digest factory
depends on, plus the exception hierarchy shared by the package:

    - pbkdf2: callback-style PBKDF2-HMAC derivation backed by the
      ``cryptography`` library, computed off the calling thread
    - random_bytes: cryptographically secure random bytes

Both are plain callables so they can be swapped for fakes or for other
implementations when a digester is built.

Example Usage:
    >>> from pbkdf2sha512.engine import pbkdf2, random_bytes
    >>> salt = random_bytes(64)
    >>> pbkdf2(b"passphrase", salt, 65536, 64, "sha512",
    ...        lambda err, key: print(err or key.hex()))
"""

import os
import logging
import threading
from typing import Optional, Dict, Any, Callable

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.backends import default_backend

logger = logging.getLogger(__name__)

# callback(error, derived_key): exactly one of the two is None
DeriveCallback = Callable[[Optional[BaseException], Optional[bytes]], None]
DeriveFn = Callable[[bytes, bytes, int, int, str, DeriveCallback], None]
RandomBytesFn = Callable[[int], bytes]


class CryptoError(Exception):
    """
    Base exception for cryptographic errors.

    This exception is raised when cryptographic operations fail due to
    invalid inputs or backend failures.
    """

    def __init__(self, message: str, code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        base = f"CryptoError: {self.message}"
        if self.code:
            base += f" (Code: {self.code})"
        return base


class InvalidArgumentError(CryptoError, TypeError):
    """Raised when a password is not text, bytes or a byte view."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__("invalid argument", code=8001, details=details)

    def __str__(self) -> str:
        return self.message


_HASH_ALGORITHMS = {
    "sha256": hashes.SHA256,
    "sha512": hashes.SHA512,
}


def derive_key(password: bytes, salt: bytes, iterations: int, length: int, digest: str = "sha512") -> bytes:
    """
    Derive a key with PBKDF2-HMAC, blocking the calling thread.

    Args:
        password: Password bytes
        salt: Salt bytes
        iterations: PBKDF2 iteration count
        length: Derived key length in bytes
        digest: HMAC hash name ("sha256" or "sha512")

    Returns:
        The derived key

    Raises:
        CryptoError: If the hash is unsupported or the backend fails
    """
    if digest not in _HASH_ALGORITHMS:
        raise CryptoError(f"Unsupported HMAC digest: {digest}", code=6001)

    try:
        kdf = PBKDF2HMAC(
            algorithm=_HASH_ALGORITHMS[digest](),
            length=length,
            salt=salt,
            iterations=iterations,
            backend=default_backend()
        )
        return kdf.derive(password)
    except Exception as e:
        logger.error(f"PBKDF2 derivation failed: {e}")
        raise CryptoError(f"Key derivation failed: {e}", code=6002)


def pbkdf2(
    password: bytes,
    salt: bytes,
    iterations: int,
    length: int,
    digest: str,
    callback: DeriveCallback,
) -> None:
    """
    Derive a key on a worker thread and report through ``callback``.

    The callback is invoked exactly once, from the worker thread, with
    either ``(error, None)`` or ``(None, derived_key)``.
    """
    def _run() -> None:
        try:
            key = derive_key(password, salt, iterations, length, digest)
        except CryptoError as e:
            callback(e, None)
            return
        callback(None, key)

    worker = threading.Thread(target=_run, name="pbkdf2-derive", daemon=True)
    worker.start()


def random_bytes(length: int) -> bytes:
    """
    Generate cryptographically secure random bytes.

    Args:
        length: Number of bytes to generate

    Returns:
        Random bytes from the operating system CSPRNG
    """
    return os.urandom(length)


def secure_compare(a: bytes, b: bytes) -> bool:
    """
    Compare two byte sequences in constant time.

    Returns:
        True if sequences are equal, False otherwise
    """
    if len(a) != len(b):
        return False

    result = 0
    for (x, y) in zip(a, b):
        result |= x ^ y

    return result == 0
