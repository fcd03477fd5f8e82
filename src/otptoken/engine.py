"""
Code generation and verification over secrets in any supported encoding.

These functions are what provisioning and activation workflows call: hand in a
secret as Base32, Hex or Text plus the token parameters, get back a code (or
the codes of a small window around now), or a yes/no verdict on a candidate.
Nothing is cached between calls.
"""
import datetime
import logging
import time
from typing import Any, List, Optional, Union

from . import utils
from .codec import EncodedSecret, SecretEncoding
from .exceptions import InvalidParameters
from .models import (
    DEFAULT_DIGITS,
    DEFAULT_INTERVAL,
    DEFAULT_WINDOW,
    HashAlgorithm,
    OTPParameters,
    OTPResult,
    unix_time,
)
from .totp import TOTP

log = logging.getLogger(__name__)

SecretLike = Union[EncodedSecret, str]
TimeLike = Union[int, float, datetime.datetime]


def _token(secret: SecretLike, params: OTPParameters, encoding: Any, strict: bool) -> TOTP:
    if isinstance(secret, EncodedSecret):
        if encoding is not None and SecretEncoding.parse(encoding) is not secret.encoding:
            raise InvalidParameters(
                "encoding={} conflicts with the secret's own {}".format(encoding, secret.encoding.name)
            )
        value, encoding = secret.value, secret.encoding
    else:
        value = secret
        if encoding is None:
            encoding = SecretEncoding.BASE32
    return TOTP(
        value,
        digits=params.digits,
        digest=params.algorithm,
        interval=params.interval,
        encoding=encoding,
        strict=strict,
    )


def generate_codes(
    secret: SecretLike,
    params: Optional[OTPParameters] = None,
    for_time: Optional[TimeLike] = None,
    counter: Optional[int] = None,
    *,
    encoding: Union[SecretEncoding, str, None] = None,
    strict: bool = False,
) -> List[OTPResult]:
    """
    Computes the codes for one counter step and the ``params.window - 1``
    steps either side of it.

    :param secret: an EncodedSecret, or a string written in ``encoding``
        (Base32 if not given). An EncodedSecret carries its own encoding; an
        ``encoding`` that disagrees with it raises InvalidParameters.
    :param params: digits, interval, algorithm and window; defaults if None
    :param for_time: reference time, defaults to now
    :param counter: use this counter directly instead of deriving one from
        ``for_time`` (HOTP)
    :param strict: never treat a Hex or Text secret as Base32
    :returns: results in ascending counter order, exactly one marked current.
        Usually ``2 * window - 1`` of them, fewer within the first
        ``window - 1`` steps after the epoch since counters below zero are
        left out.
    :raises InvalidParameters: before any hashing, if params are out of range
    :raises InvalidSecret: if the secret is empty or cannot be decoded
    """
    params = (params or OTPParameters()).validate()
    token = _token(secret, params, encoding, strict)
    if counter is None:
        if for_time is None:
            for_time = time.time()
        counter = token.timecode(for_time)
    if counter < 0:
        raise InvalidParameters("counter must not be negative, got {}".format(counter))
    log.debug(
        "Generating %d code(s) around counter %d with %s",
        2 * params.window - 1,
        counter,
        params.algorithm.name,
    )
    return token.window_codes(counter, params.window, params.interval)


def verify(
    secret: SecretLike,
    code: str,
    params: Optional[OTPParameters] = None,
    for_time: Optional[TimeLike] = None,
    counter: Optional[int] = None,
    *,
    encoding: Union[SecretEncoding, str, None] = None,
    strict: bool = False,
) -> bool:
    """
    Checks ``code`` against every code in the window around ``for_time``
    (or ``counter``).

    A code of the wrong length is simply wrong and yields False. The match
    is exact, with no Unicode normalisation, so fullwidth digits are
    rejected. Every comparison is constant time and all of them run.
    """
    params = (params or OTPParameters()).validate()
    code = str(code)
    if len(code) != params.digits:
        return False
    matched = False
    for result in generate_codes(secret, params, for_time, counter, encoding=encoding, strict=strict):
        matched |= utils.strings_equal(code, result.code, normalize=False)
    return matched


def generate_otp(
    secret: str,
    encoding: Union[SecretEncoding, str] = SecretEncoding.BASE32,
    digits: int = DEFAULT_DIGITS,
    interval: int = DEFAULT_INTERVAL,
    algorithm: Any = HashAlgorithm.SHA1,
    for_time: Optional[TimeLike] = None,
    window: int = DEFAULT_WINDOW,
    strict: bool = False,
) -> Union[str, List[OTPResult]]:
    """
    Returns the current code as a string when ``window`` is 1, otherwise the
    full list of OTPResult around ``for_time`` (default now).

    The list holds ``2 * window - 1`` results, except within the first
    ``window - 1`` steps after the Unix epoch: counters below zero do not
    exist, so those steps are left out and the list is shorter.
    """
    params = OTPParameters(digits=digits, interval=interval, algorithm=HashAlgorithm.parse(algorithm), window=window)
    results = generate_codes(
        EncodedSecret(secret, SecretEncoding.parse(encoding)), params, for_time=for_time, strict=strict
    )
    if window == 1:
        return results[0].code
    return results


def verify_otp(
    secret: str,
    code: str,
    encoding: Union[SecretEncoding, str] = SecretEncoding.BASE32,
    digits: int = DEFAULT_DIGITS,
    interval: int = DEFAULT_INTERVAL,
    window: int = DEFAULT_WINDOW,
    algorithm: Any = HashAlgorithm.SHA1,
    for_time: Optional[TimeLike] = None,
    strict: bool = False,
) -> bool:
    params = OTPParameters(digits=digits, interval=interval, algorithm=HashAlgorithm.parse(algorithm), window=window)
    return verify(EncodedSecret(secret, SecretEncoding.parse(encoding)), code, params, for_time=for_time, strict=strict)


def interval_remaining(interval: int = DEFAULT_INTERVAL, for_time: Optional[TimeLike] = None) -> int:
    """Seconds until the code for ``for_time`` (default now) rolls over."""
    if for_time is None:
        for_time = time.time()
    return interval - unix_time(for_time) % interval
