import datetime
import time
from typing import Any, List, Optional, Union

from . import utils
from .codec import SecretEncoding
from .exceptions import InvalidParameters
from .models import DEFAULT_DIGITS, DEFAULT_INTERVAL, OTPResult, unix_time
from .otp import OTP

TimeLike = Union[int, float, datetime.datetime]


class TOTP(OTP):
    """
    Handler for time-based OTP counters.
    """

    def __init__(
        self,
        s: str,
        digits: int = DEFAULT_DIGITS,
        digest: Any = None,
        name: Optional[str] = None,
        issuer: Optional[str] = None,
        interval: int = DEFAULT_INTERVAL,
        encoding: Union[SecretEncoding, str] = SecretEncoding.BASE32,
        strict: bool = False,
    ) -> None:
        """
        :param s: secret, written in ``encoding``
        :param digits: number of integers in the OTP, 6 to 10
        :param digest: hash algorithm for the HMAC, SHA1 unless given
        :param name: account name
        :param issuer: issuer
        :param interval: the time step in seconds
        :param encoding: Base32 (default), Hex or Text
        :param strict: never treat a Hex or Text secret as Base32
        """
        if not isinstance(interval, int) or interval <= 0:
            raise InvalidParameters("interval must be a positive number of seconds")
        self.interval = interval
        super().__init__(
            s=s, digits=digits, digest=digest, name=name, issuer=issuer, encoding=encoding, strict=strict
        )

    def at(self, for_time: TimeLike, counter_offset: int = 0) -> str:
        """
        Accepts either a Unix timestamp integer or a datetime object.

        :param for_time: the time to generate an OTP for
        :param counter_offset: the amount of ticks to add to the time counter
        :returns: OTP value
        """
        return self.generate_otp(self.timecode(for_time) + int(counter_offset))

    def now(self) -> str:
        """
        Generate the current time OTP

        :returns: OTP value
        """
        return self.at(time.time())

    def codes(self, for_time: Optional[TimeLike] = None, window: int = 1) -> List[OTPResult]:
        """
        The code for ``for_time`` (default now) and ``window - 1`` steps either side.
        """
        if for_time is None:
            for_time = time.time()
        return self.window_codes(self.timecode(for_time), window, self.interval)

    def verify(self, otp: str, for_time: Optional[TimeLike] = None, valid_window: int = 0) -> bool:
        """
        Verifies the OTP passed in against the current time OTP.

        :param otp: the OTP to check against
        :param for_time: Time to check OTP at (defaults to now)
        :param valid_window: extends the validity to this many counter ticks before and after the current one
        :returns: True if verification succeeded, False otherwise
        """
        if for_time is None:
            for_time = time.time()
        otp = str(otp)
        if len(otp) != self.digits:
            return False
        matched = False
        for result in self.codes(for_time, window=valid_window + 1):
            # no early exit, every step is compared
            matched |= utils.strings_equal(otp, result.code)
        return matched

    def provisioning_uri(self, name: Optional[str] = None, issuer_name: Optional[str] = None, **kwargs) -> str:
        """
        Returns the provisioning URI for the OTP.  This can then be
        encoded in a QR Code and used to provision a hardware or soft token.

        See also:
            https://github.com/google/google-authenticator/wiki/Key-Uri-Format

        :returns: provisioning URI
        """
        return utils.build_uri(
            self.base32_secret(),
            name if name else self.name,
            issuer=issuer_name if issuer_name else self.issuer,
            algorithm=self.algorithm.name,
            digits=self.digits,
            period=self.interval,
            **kwargs,
        )

    def timecode(self, for_time: TimeLike) -> int:
        """
        Number of whole intervals between the Unix epoch and ``for_time``.
        """
        return unix_time(for_time) // self.interval
