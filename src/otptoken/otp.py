import hmac
from typing import Any, List, Optional, Union

from . import codec
from .codec import SecretEncoding
from .exceptions import InvalidParameters
from .models import DEFAULT_DIGITS, DIGITS_RANGE, HashAlgorithm, OTPResult, check_range


def dynamic_truncate(hmac_hash: bytes) -> int:
    """
    RFC 4226 section 5.3: pick 4 bytes at the offset given by the low nibble of
    the last byte and read them as a 31-bit big-endian integer.
    """
    offset = hmac_hash[-1] & 0x0F
    chunk = bytearray(hmac_hash[offset : offset + 4])
    chunk[0] &= 0x7F
    return int.from_bytes(chunk, byteorder="big", signed=False)


class OTP(object):
    """
    Base class for OTP handlers.
    """

    def __init__(
        self,
        s: str,
        digits: int = DEFAULT_DIGITS,
        digest: Any = None,
        name: Optional[str] = None,
        issuer: Optional[str] = None,
        encoding: Union[SecretEncoding, str] = SecretEncoding.BASE32,
        strict: bool = False,
    ) -> None:
        check_range("digits", digits, DIGITS_RANGE)
        self.digits = digits
        self.algorithm = HashAlgorithm.parse(digest)
        self.digest = self.algorithm.digest
        self.secret = s
        self.encoding = SecretEncoding.parse(encoding)
        self.strict = strict
        self.name = name or "Secret"
        self.issuer = issuer

    def generate_otp(self, input: int) -> str:
        """
        :param input: the HMAC counter value to use as the OTP input.
            Usually either the counter, or the computed integer based on the Unix timestamp
        """
        if input < 0:
            raise InvalidParameters("input must be positive integer")
        return self._code(self.byte_secret(), input)

    def _code(self, key: bytes, counter: int) -> str:
        hasher = hmac.new(key, self.int_to_bytestring(counter), self.digest)
        code = dynamic_truncate(hasher.digest()) % 10**self.digits
        # fixed width, 42 with 6 digits is "000042"
        return str(code).zfill(self.digits)

    def window_codes(self, counter: int, window: int = 1, interval: int = 0) -> List[OTPResult]:
        """
        Codes for ``counter`` and the ``window - 1`` steps either side of it,
        in ascending counter order. Steps that would fall below zero are left out.

        :param interval: step length in seconds, used for the validity bounds
        """
        key = self.byte_secret()
        results = []
        for offset in range(-(window - 1), window):
            current = counter + offset
            if current < 0:
                continue
            results.append(
                OTPResult(
                    code=self._code(key, current),
                    counter=current,
                    valid_from=current * interval,
                    valid_until=(current + 1) * interval,
                    is_current=offset == 0,
                )
            )
        return results

    def byte_secret(self) -> bytes:
        return codec.secret_bytes(self.secret, self.encoding, strict=self.strict)

    def base32_secret(self) -> str:
        """The secret as Base32, the form provisioning URIs carry."""
        return codec.encode(self.secret, self.encoding, strict=self.strict)

    @staticmethod
    def int_to_bytestring(i: int, padding: int = 8) -> bytes:
        """
        Turns an integer to the OATH specified
        bytestring, which is fed to the HMAC
        along with the secret
        """
        try:
            return i.to_bytes(padding, byteorder="big", signed=False)
        except OverflowError:
            raise InvalidParameters("counter does not fit in {} bytes".format(padding)) from None
