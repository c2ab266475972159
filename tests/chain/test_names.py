"""
Tests for name encoding helpers.
"""

import pytest

from chain.exceptions import InvalidNameError
from chain.names import clean_name, decode_name, encode_name, require_valid_name, verify_name


class TestEncoding:
    """Tests for punycode encoding of names."""

    def test_ascii_is_lowercased(self):
        assert encode_name("OCER") == "ocer"

    def test_unicode_roundtrip(self):
        """Test that a unicode name encodes to its ACE form and back."""
        encoded = encode_name("münchen")

        assert encoded == "xn--mnchen-3ya"
        assert decode_name(encoded) == "münchen"

    def test_decode_plain_name(self):
        assert decode_name("ocer") == "ocer"


class TestCleanName:
    """Tests for clean_name."""

    @pytest.mark.parametrize("raw,expected", [
        ("ocer", "ocer"),
        ("  OCER ", "ocer"),
        ("ocer/", "ocer"),
        ("ocer.", "ocer"),
        ("Ocer/ ", "ocer"),
    ])
    def test_normalizes_user_input(self, raw, expected):
        assert clean_name(raw) == expected


class TestVerifyName:
    """Tests for verify_name and require_valid_name."""

    @pytest.mark.parametrize("name", ["ocer", "a", "xn--mnchen-3ya", "name_1", "a" * 63])
    def test_valid(self, name):
        assert verify_name(name) is True

    @pytest.mark.parametrize("name", ["", "a" * 64, "-ocer", "ocer_", "Ocer", "oc.er", "oc er", None, 5])
    def test_invalid(self, name):
        assert verify_name(name) is False

    def test_require_valid_name(self):
        """Test that invalid names raise with the name attached."""
        assert require_valid_name("ocer") == "ocer"

        with pytest.raises(InvalidNameError) as exc_info:
            require_valid_name("-bad")
        assert exc_info.value.name == "-bad"
        assert exc_info.value.operation == "verify_name"
