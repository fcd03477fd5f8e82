class OTPError(ValueError):
    """
    Base class for every error raised by otptoken.

    Subclasses ValueError so callers written against plain ValueError keep working.
    """


class FormatError(OTPError):
    """Malformed secret encoding: bad hex, bad Base32 character, odd-length hex."""


class InvalidSecret(OTPError):
    """The secret is empty or cannot be decoded into HMAC key bytes."""


class InvalidParameters(OTPError):
    """Digits, interval, window, algorithm or counter outside the supported range."""
