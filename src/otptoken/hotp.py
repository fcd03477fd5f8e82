from typing import Any, Optional, Union

from . import utils
from .codec import SecretEncoding
from .models import DEFAULT_DIGITS
from .otp import OTP


class HOTP(OTP):
    """
    Handler for HMAC-based OTP counters.
    """

    def __init__(
        self,
        s: str,
        digits: int = DEFAULT_DIGITS,
        digest: Any = None,
        name: Optional[str] = None,
        issuer: Optional[str] = None,
        initial_count: int = 0,
        encoding: Union[SecretEncoding, str] = SecretEncoding.BASE32,
        strict: bool = False,
    ) -> None:
        """
        :param s: secret, written in ``encoding``
        :param initial_count: starting HMAC counter value, defaults to 0
        :param digits: number of integers in the OTP, 6 to 10
        :param digest: hash algorithm for the HMAC, SHA1 unless given
        :param name: account name
        :param issuer: issuer
        :param encoding: Base32 (default), Hex or Text
        :param strict: never treat a Hex or Text secret as Base32
        """
        self.initial_count = initial_count
        super().__init__(
            s=s, digits=digits, digest=digest, name=name, issuer=issuer, encoding=encoding, strict=strict
        )

    def at(self, count: int) -> str:
        """
        Generates the OTP for the given count.

        :param count: the OTP HMAC counter
        :returns: OTP
        """
        return self.generate_otp(self.initial_count + count)

    def verify(self, otp: str, counter: int) -> bool:
        """
        Verifies the OTP passed in against the current counter OTP.

        :param otp: the OTP to check against
        :param counter: the OTP HMAC counter
        """
        return utils.strings_equal(str(otp), str(self.at(counter)))

    def provisioning_uri(
        self,
        name: Optional[str] = None,
        initial_count: Optional[int] = None,
        issuer_name: Optional[str] = None,
        **kwargs,
    ) -> str:
        """
        Returns the provisioning URI for the OTP.  This can then be
        encoded in a QR Code and used to provision a hardware or soft token.

        See also:
            https://github.com/google/google-authenticator/wiki/Key-Uri-Format

        :param name: name of the user account
        :param initial_count: starting HMAC counter value, defaults to 0
        :param issuer_name: the name of the OTP issuer
        :returns: provisioning URI
        """
        return utils.build_uri(
            self.base32_secret(),
            name=name if name else self.name,
            initial_count=initial_count if initial_count is not None else self.initial_count,
            issuer=issuer_name if issuer_name else self.issuer,
            algorithm=self.algorithm.name,
            digits=self.digits,
            **kwargs,
        )
