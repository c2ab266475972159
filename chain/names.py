"""
Name encoding helpers.

Names are stored and compared in their encoded (punycode, lower-case)
form. Unicode input is encoded label by label.
"""

import re

from core.constants import MAX_NAME_SIZE

from .exceptions import InvalidNameError


_ACE_PREFIX = "xn--"
_TRAILING_SLASH = re.compile(r"/ *$")
_TRAILING_DOT = re.compile(r"\. *$")
_NAME_CHARS = re.compile(r"^[a-z0-9_-]+$")


def _encode_label(label: str) -> str:
    if label.isascii():
        return label
    return _ACE_PREFIX + label.encode("punycode").decode("ascii")


def _decode_label(label: str) -> str:
    if label.lower().startswith(_ACE_PREFIX):
        return label[len(_ACE_PREFIX):].encode("ascii").decode("punycode")
    return label


def encode_name(name: str) -> str:
    """Encode a unicode name with punycode and lower-case it."""
    return ".".join(_encode_label(label) for label in name.split(".")).lower()


def decode_name(encoded_name: str) -> str:
    """Decode a punycode name back to unicode."""
    return ".".join(_decode_label(label) for label in encoded_name.split("."))


def clean_name(raw_name: str) -> str:
    """Normalize a name typed by a user: lower-case, no trailing slash or dot."""
    name = raw_name.strip().lower()
    name = _TRAILING_SLASH.sub("", name)
    name = _TRAILING_DOT.sub("", name)
    return name


def verify_name(encoded_name: str) -> bool:
    """Check an encoded name against the chain's naming rules."""
    if not isinstance(encoded_name, str):
        return False
    if not 0 < len(encoded_name) <= MAX_NAME_SIZE:
        return False
    if not _NAME_CHARS.match(encoded_name):
        return False
    return encoded_name[0] not in "-_" and encoded_name[-1] not in "-_"


def require_valid_name(encoded_name: str) -> str:
    """Return the name unchanged or raise InvalidNameError."""
    if not verify_name(encoded_name):
        raise InvalidNameError(encoded_name)
    return encoded_name
