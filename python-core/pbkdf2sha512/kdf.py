#!/usr/bin/env python3
"""
PBKDF2-SHA512 Digest Module

This module provides the digest factory: it binds a resolved derivation
spec and a derive collaborator into a reusable, asynchronous
password-hashing callable.

Every digest is self-describing. The result carries the encoded key
together with the exact parameters that produced it (encoding, salt,
iterations, length, hmac), so it can be reproduced and verified later
without any other state.

Module Structure:
- DigestSpec: Public copy of the parameters behind a digest
- DigestResult: Derived key plus its DigestSpec
- Pbkdf2Sha512Digester: Callable bound to one resolved spec
- make_digester: Factory resolving a raw configuration into a digester
- verify: Re-derive a digest from its spec and compare

Example Usage:
    >>> import asyncio
    >>> from pbkdf2sha512 import make_digester
    >>> digest = make_digester({"iterations": 16384, "length": 64})
    >>> result = asyncio.run(digest("secret passphrase"))
    >>> result.spec.encoding, result.spec.iterations, result.spec.hmac
    ('base64', 16384, 'sha512')

Concurrency:
    Calls to one digester are independent and may run concurrently; the
    bound spec is read-only. Results complete in the order the derive
    collaborator finishes. There is no cancellation or timeout: wrap the
    call in ``asyncio.wait_for`` if the collaborator may never answer.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Union
from dataclasses import dataclass, asdict

from .config import DerivationSpec, SaltSpec, HMAC, as_mapping, resolve_spec
from .encoding import RAW, to_bytes, to_text, utf8_bytes
from .engine import (
    CryptoError,
    DeriveFn,
    InvalidArgumentError,
    RandomBytesFn,
    pbkdf2,
    random_bytes,
    secure_compare,
)

logger = logging.getLogger(__name__)

Password = Union[str, bytes, bytearray, memoryview]


@dataclass(frozen=True)
class DigestSpec:
    """
    Parameters that produced a digest.

    Attributes:
        encoding: Encoding of the digest value and salt ("none" for raw bytes)
        salt: Salt text in ``encoding``, or raw bytes when encoding is "none"
        iterations: PBKDF2 iteration count
        length: Derived key length in bytes
        hmac: HMAC hash name, always "sha512"
    """
    encoding: str
    salt: Union[str, bytes]
    iterations: int
    length: int
    hmac: str = HMAC


@dataclass(frozen=True)
class DigestResult:
    """
    Data class containing the result of a password digest.

    Attributes:
        value: The derived key, text in ``spec.encoding`` or raw bytes
        spec: The parameters used to derive ``value``
    """
    value: Union[str, bytes]
    spec: DigestSpec

    def as_dict(self) -> Dict[str, Any]:
        """Plain dictionary rendering, e.g. for storage."""
        return asdict(self)


def _to_password_bytes(password: Any) -> bytes:
    if isinstance(password, str):
        return utf8_bytes(password)
    if isinstance(password, (bytes, bytearray, memoryview)):
        return bytes(password)
    raise InvalidArgumentError(details={"type": type(password).__name__})


class Pbkdf2Sha512Digester:
    """
    Password digester bound to one resolved derivation spec.

    Instances are callables: ``await digester(password)`` returns a
    ``DigestResult``. All passwords digested by one instance share the
    same salt, iteration count, key length and encoding.

    Usage:
        >>> digester = Pbkdf2Sha512Digester(pbkdf2, resolve_spec({}, random_bytes))
        >>> result = await digester("my_password")
        >>> result.spec.salt == digester.spec.salt.chars
        True
    """

    def __init__(self, derive_fn: DeriveFn, spec: DerivationSpec):
        self._derive_fn = derive_fn
        self._spec = spec
        self._public_spec = DigestSpec(
            encoding=spec.encoding,
            salt=spec.salt.raw if spec.salt.chars is None else spec.salt.chars,
            iterations=spec.iterations,
            length=spec.length,
            hmac=spec.hmac,
        )

    @property
    def spec(self) -> DerivationSpec:
        """The resolved derivation spec this digester is bound to."""
        return self._spec

    async def __call__(self, password: Password) -> DigestResult:
        """
        Digest a password.

        Args:
            password: Text (UTF-8 encoded), bytes, bytearray or memoryview

        Returns:
            DigestResult with the encoded key and its spec

        Raises:
            InvalidArgumentError: If password has any other type; the
                derive collaborator is not invoked
            Exception: Whatever the derive collaborator reports, unchanged
        """
        return await self.hash(_to_password_bytes(password))

    async def hash(self, password: bytes) -> DigestResult:
        """Derive a key from password bytes with the bound spec."""
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def _settle(err: Optional[BaseException], digest: Optional[bytes]) -> None:
            if future.done():
                return
            if err is not None:
                if not isinstance(err, BaseException):
                    err = CryptoError(f"Key derivation failed: {err!r}", code=6003)
                future.set_exception(err)
            else:
                future.set_result(digest)

        def _on_complete(err: Optional[BaseException], digest: Optional[bytes]) -> None:
            # may be invoked from a worker thread, after the loop has closed
            try:
                loop.call_soon_threadsafe(_settle, err, digest)
            except RuntimeError:
                logger.debug("Event loop closed before key derivation completed")

        spec = self._spec
        self._derive_fn(password, spec.salt.raw, spec.iterations, spec.length, spec.hmac, _on_complete)
        digest = bytes(await future)

        return DigestResult(
            value=digest if spec.encoding == RAW else to_text(digest, spec.encoding),
            spec=self._public_spec,
        )


def make_digester(config: Optional[Any] = None, **options: Any) -> Pbkdf2Sha512Digester:
    """
    Build a password digester from a raw configuration.

    The configuration is resolved once; invalid or missing fields fall
    back to their defaults (see ``pbkdf2sha512.config``).

    Args:
        config: Mapping with optional ``encoding``, ``salt``, ``iterations``,
            ``length``, ``relaxed``, ``derive_fn`` and ``random_bytes_fn``
        **options: Same keys, taking precedence over ``config``

    Returns:
        A ready Pbkdf2Sha512Digester

    Example:
        >>> digest = make_digester(encoding="hex", iterations=1, relaxed=True)
        >>> result = await digest(b"password")
        >>> len(result.value)
        128
    """
    merged = dict(as_mapping(config))
    merged.update(options)

    derive_fn: DeriveFn = _collaborator(merged, "derive_fn", pbkdf2)
    random_bytes_fn: RandomBytesFn = _collaborator(merged, "random_bytes_fn", random_bytes)

    spec = resolve_spec(merged, random_bytes_fn)
    logger.debug(
        f"Digester ready: encoding={spec.encoding} iterations={spec.iterations} "
        f"length={spec.length} salt_length={len(spec.salt.raw)} hmac={spec.hmac}"
    )
    return Pbkdf2Sha512Digester(derive_fn, spec)


def _collaborator(config: Dict[str, Any], name: str, default: Any) -> Any:
    fn = config.get(name)
    if fn is None:
        return default
    if not callable(fn):
        logger.warning(f"Ignoring non-callable {name}, using platform default")
        return default
    return fn


async def verify(password: Password, digest: DigestResult, derive_fn: Optional[DeriveFn] = None) -> bool:
    """
    Verify a password against a previous digest.

    Re-derives a key with the parameters recorded in ``digest.spec`` and
    compares it with ``digest.value`` in constant time. Text values and
    salts are decoded with ``digest.spec.encoding`` first.

    Args:
        password: The password to check
        digest: A DigestResult, e.g. from a Pbkdf2Sha512Digester
        derive_fn: Derive collaborator (default: platform pbkdf2)

    Returns:
        True if the password matches, False otherwise

    Raises:
        InvalidArgumentError: If password has an unsupported type
    """
    spec = digest.spec
    if spec.encoding == RAW:
        salt = SaltSpec(raw=bytes(spec.salt))
    else:
        salt = SaltSpec(raw=to_bytes(spec.salt, spec.encoding), chars=spec.salt)

    digester = Pbkdf2Sha512Digester(
        derive_fn or pbkdf2,
        DerivationSpec(
            encoding=spec.encoding,
            salt=salt,
            iterations=spec.iterations,
            length=spec.length,
            hmac=spec.hmac,
        ),
    )
    result = await digester(password)

    return secure_compare(_value_bytes(result), _value_bytes(digest))


def _value_bytes(digest: DigestResult) -> bytes:
    if isinstance(digest.value, bytes):
        return digest.value
    return to_bytes(digest.value, digest.spec.encoding)
