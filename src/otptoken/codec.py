import re
from enum import Enum
from typing import NamedTuple, Optional, Union

from .exceptions import FormatError, InvalidSecret

B32_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
_B32_VALUES = {char: value for value, char in enumerate(B32_ALPHABET)}

# Anything matching this is taken to be Base32 already, unless strict=True.
# Hex such as "ABCDEF23" or text such as "HELLO" matches too.
BASE32_PATTERN = re.compile(r"[A-Z2-7]+=*")
HEX_SEPARATORS = re.compile(r"[-: ]")
_HEX_PATTERN = re.compile(r"[0-9a-fA-F]*")
_WHITESPACE = re.compile(r"\s+")


class SecretEncoding(Enum):
    BASE32 = "base32"
    HEX = "hex"
    TEXT = "text"

    @classmethod
    def parse(cls, value: Union["SecretEncoding", str]) -> "SecretEncoding":
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise FormatError("Unknown secret encoding {!r}, must be Base32, Hex or Text".format(value)) from None


class EncodedSecret(NamedTuple):
    """A secret string together with the encoding it is written in."""

    value: str
    encoding: SecretEncoding = SecretEncoding.BASE32


def hex_to_bytes(value: str) -> bytes:
    """
    Converts a hex string to raw bytes.

    ``-``, ``:`` and spaces are treated as separators and dropped first,
    so "de:ad:be:ef" and "DE-AD BE-EF" both work.

    :raises FormatError: on non-hex characters or an odd number of digits
    """
    cleaned = HEX_SEPARATORS.sub("", value)
    if not _HEX_PATTERN.fullmatch(cleaned):
        raise FormatError("Hex secret contains non-hex characters")
    if len(cleaned) % 2 != 0:
        raise FormatError("Hex secret must have an even number of digits, got {}".format(len(cleaned)))
    return bytes(int(cleaned[i : i + 2], 16) for i in range(0, len(cleaned), 2))


def bytes_to_base32(data: bytes) -> str:
    """
    Packs raw bytes into RFC 4648 Base32, padded with ``=`` to a multiple of 8.

    The bytes are read as one big-endian bit stream and cut into 5-bit groups;
    the last group is zero-filled on the right.
    """
    chars = []
    buffer = 0
    bits = 0
    for byte in bytearray(data):
        buffer = (buffer << 8) | byte
        bits += 8
        while bits >= 5:
            bits -= 5
            chars.append(B32_ALPHABET[(buffer >> bits) & 0x1F])
        buffer &= (1 << bits) - 1
    if bits:
        chars.append(B32_ALPHABET[(buffer << (5 - bits)) & 0x1F])
    missing_padding = len(chars) % 8
    if missing_padding:
        chars.append("=" * (8 - missing_padding))
    return "".join(chars)


def encode(
    value: str,
    encoding: Union[SecretEncoding, str] = SecretEncoding.TEXT,
    strict: bool = False,
) -> str:
    """
    Converts a secret written in any supported encoding to Base32.

    :param value: the secret as written by the caller
    :param encoding: what ``value`` is written in: Base32, Hex or Text
    :param strict: when False (the default) a value that already looks like
        Base32 is returned as is, whatever ``encoding`` says. Set it to
        True to always honour ``encoding``.
    :returns: padded Base32 string
    :raises FormatError: on malformed hex input
    """
    if value is None:
        raise FormatError("Secret must not be None")
    encoding = SecretEncoding.parse(encoding)
    if encoding is SecretEncoding.BASE32 or (not strict and BASE32_PATTERN.fullmatch(value)):
        return value
    if encoding is SecretEncoding.HEX:
        raw = hex_to_bytes(value)
    else:
        raw = value.encode("utf-8")
    return bytes_to_base32(raw)


encode_to_base32 = encode


def decode(value: str, output: Optional[Union[SecretEncoding, str]] = None) -> Union[bytes, str]:
    """
    Decodes Base32 text into raw bytes.

    Case and whitespace are ignored and trailing padding is optional. Bits
    left over after the last full byte are padding and get dropped.

    :param value: Base32 text
    :param output: None for bytes, or a SecretEncoding to get the bytes back
        as hex, UTF-8 text or canonical Base32
    :raises FormatError: on any character outside ``A-Z2-7``
    """
    if value is None:
        raise FormatError("Secret must not be None")
    cleaned = _WHITESPACE.sub("", value)
    # upper() maps some non-ASCII letters onto the alphabet, "ß" becomes "SS"
    if not cleaned.isascii():
        raise FormatError("Base32 secret must contain only ASCII characters")
    cleaned = cleaned.upper().rstrip("=")

    raw = bytearray()
    buffer = 0
    bits = 0
    for position, char in enumerate(cleaned):
        try:
            buffer = (buffer << 5) | _B32_VALUES[char]
        except KeyError:
            raise FormatError("Invalid Base32 character {!r} at position {}".format(char, position)) from None
        bits += 5
        if bits >= 8:
            bits -= 8
            raw.append((buffer >> bits) & 0xFF)
            buffer &= (1 << bits) - 1
    data = bytes(raw)

    if output is None:
        return data
    output = SecretEncoding.parse(output)
    if output is SecretEncoding.HEX:
        return data.hex()
    if output is SecretEncoding.TEXT:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FormatError("Decoded secret is not valid UTF-8") from e
    return bytes_to_base32(data)


def secret_bytes(
    value: str,
    encoding: Union[SecretEncoding, str] = SecretEncoding.BASE32,
    strict: bool = False,
) -> bytes:
    """
    Returns the HMAC key bytes for a secret in any supported encoding.

    Goes through Base32 so that the auto-detection in :func:`encode` applies
    here exactly as it does for callers storing the encoded form.

    :raises InvalidSecret: if the secret cannot be decoded or is empty
    """
    try:
        key = decode(encode(value, encoding, strict=strict))
    except FormatError as e:
        raise InvalidSecret("Secret could not be decoded: {}".format(e)) from e
    if not key:
        raise InvalidSecret("Secret must decode to at least one byte")
    return key
