"""
Unit Tests for Salt and Key Encodings

This module tests the byte/text conversions used for salts and
derived keys.
"""

import base64
import pytest

from pbkdf2sha512.encoding import ENCODINGS, to_bytes, to_text, utf8_bytes


class TestToText:
    """Test cases for rendering bytes as text."""

    def test_default_encoding_is_base64(self):
        assert ENCODINGS[0] == "base64"

    def test_base64(self):
        assert to_text(b"\x00\xffsalt", "base64") == base64.b64encode(b"\x00\xffsalt").decode()

    def test_hex(self):
        assert to_text(b"\x00\xab\xff", "hex") == "00abff"

    @pytest.mark.parametrize("encoding", ["latin1", "binary"])
    def test_latin1_maps_each_byte_to_one_char(self, encoding):
        assert to_text(bytes([0x41, 0xE9, 0xFF]), encoding) == "Aéÿ"

    def test_ascii_escapes_high_bytes(self):
        assert to_text(bytes([0x41, 0xC1]), "ascii") == "A\udcc1"

    def test_utf8_escapes_invalid_sequences(self):
        assert to_text(b"ok\xff", "utf8") == "ok\udcff"

    def test_raw_sentinel_is_rejected(self):
        with pytest.raises(ValueError):
            to_text(b"data", "none")


class TestToBytes:
    """Test cases for decoding text into bytes."""

    def test_base64_is_lenient(self):
        raw = bytes(range(10))
        encoded = base64.b64encode(raw).decode()

        assert to_bytes(encoded, "base64") == raw
        assert to_bytes(encoded.rstrip("="), "base64") == raw
        assert to_bytes(" ".join(encoded), "base64") == raw

    def test_base64_accepts_urlsafe_alphabet(self):
        raw = b"\xfb\xff\xfe"

        assert to_bytes(base64.urlsafe_b64encode(raw).decode(), "base64") == raw

    def test_hex(self):
        assert to_bytes("00abFF", "hex") == b"\x00\xab\xff"

    def test_hex_stops_at_first_invalid_pair(self):
        assert to_bytes("ab" * 40 + "z", "hex") == b"\xab" * 40
        assert to_bytes("abc", "hex") == b"\xab"
        assert to_bytes("ab zz", "hex") == b"\xab"
        assert to_bytes("xyz", "hex") == b""

    @pytest.mark.parametrize("encoding", ["latin1", "binary", "ascii"])
    def test_single_byte_encodings_keep_low_byte(self, encoding):
        assert to_bytes("Aéł", encoding) == bytes([0x41, 0xE9, 0x42])

    def test_utf8(self):
        assert to_bytes("café", "utf8") == "café".encode("utf-8")

    def test_utf8_restores_escaped_bytes(self):
        assert to_bytes("ok\udcff", "utf8") == b"ok\xff"

    def test_ascii_restores_escaped_bytes(self):
        assert to_bytes("A\udcc1", "ascii") == bytes([0x41, 0xC1])

    def test_utf8_rejects_other_lone_surrogates(self):
        with pytest.raises(ValueError):
            to_bytes("a\ud800", "utf8")

    def test_user_text_replaces_lone_surrogates(self):
        assert utf8_bytes("a\ud800") == b"a\xef\xbf\xbd"

    def test_raw_sentinel_is_rejected(self):
        with pytest.raises(ValueError):
            to_bytes("data", "none")

    @pytest.mark.parametrize("encoding", ["base64", "utf8", "latin1", "binary", "ascii", "hex"])
    def test_every_text_encoding_round_trips(self, encoding):
        raw = bytes(range(256))

        assert to_bytes(to_text(raw, encoding), encoding) == raw
