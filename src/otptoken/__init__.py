import logging
import secrets
from typing import Sequence
from urllib.parse import parse_qsl, unquote, urlparse

from .codec import B32_ALPHABET, EncodedSecret, SecretEncoding, decode, encode, encode_to_base32
from .engine import generate_codes, generate_otp, interval_remaining, verify, verify_otp
from .exceptions import FormatError, InvalidParameters, InvalidSecret, OTPError
from .hotp import HOTP as HOTP
from .models import HashAlgorithm, OTPParameters, OTPResult
from .otp import OTP as OTP
from .totp import TOTP as TOTP

logging.getLogger(__name__).addHandler(logging.NullHandler())


def random_base32(length: int = 32, chars: Sequence[str] = B32_ALPHABET) -> str:
    if length < 32:
        raise ValueError("Secrets should be at least 160 bits")

    return "".join(secrets.choice(chars) for _ in range(length))


def random_hex(length: int = 40, chars: Sequence[str] = "ABCDEF0123456789") -> str:
    if length < 40:
        raise ValueError("Secrets should be at least 160 bits")
    return random_base32(length=length, chars=chars)


def parse_uri(uri: str) -> OTP:
    """
    Builds a TOTP or HOTP from an otpauth provisioning URI.

    The label may carry the issuer as ``Issuer:account``; if the query names
    one as well the two must agree. ``digits``, ``period`` and ``algorithm``
    go through :meth:`OTPParameters.from_mapping`, so they are held to the
    same ranges as every other entry point.

    :raises InvalidParameters: on an unsupported algorithm or an out of range
        digit count or period
    :raises ValueError: if the URI is not a usable otpauth URI
    """
    parsed = urlparse(unquote(uri))
    if parsed.scheme != "otpauth":
        raise ValueError("Not an otpauth URI")
    if parsed.netloc not in ("totp", "hotp"):
        raise ValueError("Not a supported OTP type: {}".format(parsed.netloc))

    query = dict(parse_qsl(parsed.query))
    secret = query.pop("secret", None)
    if not secret:
        raise ValueError("No secret found in URI")

    issuer, sep, name = parsed.path[1:].partition(":")
    if not sep:
        issuer, name = None, issuer
    if issuer and query.get("issuer", issuer) != issuer:
        raise ValueError("Issuer in the label and the issuer parameter differ")
    issuer = issuer or query.get("issuer")

    params = OTPParameters.from_mapping(query)
    if parsed.netloc == "hotp":
        try:
            initial_count = int(query.get("counter", 0))
        except ValueError:
            raise InvalidParameters("counter must be an integer") from None
        return HOTP(
            secret,
            initial_count=initial_count,
            digits=params.digits,
            digest=params.algorithm,
            name=name,
            issuer=issuer,
        )
    return TOTP(
        secret,
        digits=params.digits,
        digest=params.algorithm,
        interval=params.interval,
        name=name,
        issuer=issuer,
    )


__all__ = [
    "B32_ALPHABET",
    "EncodedSecret",
    "FormatError",
    "HOTP",
    "HashAlgorithm",
    "InvalidParameters",
    "InvalidSecret",
    "OTP",
    "OTPError",
    "OTPParameters",
    "OTPResult",
    "SecretEncoding",
    "TOTP",
    "decode",
    "encode",
    "encode_to_base32",
    "generate_codes",
    "generate_otp",
    "interval_remaining",
    "parse_uri",
    "random_base32",
    "random_hex",
    "verify",
    "verify_otp",
]
