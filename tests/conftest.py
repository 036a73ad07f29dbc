# PBKDF2-SHA512 Test Configuration
# This file contains shared fakes and fixtures

import pytest
import sys
import os

# Add python-core to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'python-core'))


class FakePbkdf2:
    """Derive collaborator that records calls and answers synchronously."""

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def __call__(self, password, salt, iterations, length, hmac, callback):
        self.calls.append((password, salt, iterations, length, hmac))
        if self.error is not None:
            callback(self.error, None)
        else:
            callback(None, bytes(range(length)))


class FakeRandomBytes:
    """Random source returning a recognisable byte pattern."""

    def __init__(self):
        self.calls = []

    def __call__(self, length):
        self.calls.append(length)
        return bytes([0xA5]) * length


@pytest.fixture
def fake_pbkdf2():
    """Provide a recording derive collaborator."""
    return FakePbkdf2()


@pytest.fixture
def failing_pbkdf2():
    """Provide a derive collaborator that reports a backend error."""
    return FakePbkdf2(error=RuntimeError("backend failure"))


@pytest.fixture
def fake_random_bytes():
    """Provide a recording random source."""
    return FakeRandomBytes()


@pytest.fixture
def collaborators(fake_pbkdf2, fake_random_bytes):
    """Collaborator overrides for make_digester."""
    return {'derive_fn': fake_pbkdf2, 'random_bytes_fn': fake_random_bytes}
