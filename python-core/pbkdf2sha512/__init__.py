"""
PBKDF2-SHA512 Digest Package.

Configuration-validating password digests over PBKDF2-HMAC-SHA512.

Modules:
    config: Resolution of raw configurations into bounded derivation specs
    encoding: Byte/text conversions for salts and derived keys
    engine: Platform collaborators (pbkdf2, random_bytes) and errors
    kdf: Digest factory, digest results and verification

Usage:
    >>> from pbkdf2sha512 import make_digester
    >>> digest = make_digester({
    ...     # random 64-byte salt, base64 encoding (default)
    ...     "iterations": 16384,  # min 8192, default 65536
    ...     "length": 64,         # min 32, max 64, default 64
    ... })
    >>> result = await digest("secret passphrase")
    >>> result.as_dict()
    {'value': '...', 'spec': {'encoding': 'base64', 'salt': '...', 'iterations': 16384, 'length': 64, 'hmac': 'sha512'}}
"""

from .config import DerivationSpec, SaltSpec, resolve_spec
from .encoding import ENCODINGS
from .engine import CryptoError, InvalidArgumentError, pbkdf2, random_bytes
from .kdf import DigestResult, DigestSpec, Pbkdf2Sha512Digester, make_digester, verify

__all__ = [
    # Factory
    "make_digester",
    "verify",
    "Pbkdf2Sha512Digester",
    "DigestResult",
    "DigestSpec",
    # Resolution
    "resolve_spec",
    "DerivationSpec",
    "SaltSpec",
    "ENCODINGS",
    # Platform collaborators
    "pbkdf2",
    "random_bytes",
    # Errors
    "CryptoError",
    "InvalidArgumentError",
]

__version__ = "1.0.0"
