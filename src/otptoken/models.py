import calendar
import datetime
import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Union

from .exceptions import InvalidParameters

DEFAULT_DIGITS = 6
DEFAULT_INTERVAL = 30
DEFAULT_WINDOW = 1

DIGITS_RANGE = range(6, 11)
INTERVAL_RANGE = range(10, 301)
WINDOW_RANGE = range(1, 11)


class HashAlgorithm(Enum):
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"

    @property
    def digest(self) -> Callable[..., Any]:
        """The hashlib constructor to hand to :func:`hmac.new`."""
        return getattr(hashlib, self.value)

    @classmethod
    def parse(cls, value: Any) -> "HashAlgorithm":
        """
        Accepts a member, a name such as "SHA256", "sha-256" or "sha_512",
        or one of hashlib.sha1 / sha256 / sha512.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.SHA1
        if callable(value):
            value = value().name
        name = str(value).replace("-", "").replace("_", "").replace(" ", "").upper()
        try:
            return cls[name]
        except KeyError:
            raise InvalidParameters("Invalid value for algorithm, must be SHA1, SHA256 or SHA512") from None


def check_range(name: str, value: Any, valid: range) -> None:
    """Raises InvalidParameters unless ``value`` is a plain int inside ``valid``."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidParameters("{} must be an integer, got {!r}".format(name, value))
    if value not in valid:
        raise InvalidParameters(
            "{} must be between {} and {}, got {}".format(name, valid.start, valid.stop - 1, value)
        )


@dataclass(frozen=True)
class OTPParameters:
    digits: int = DEFAULT_DIGITS
    interval: int = DEFAULT_INTERVAL
    algorithm: HashAlgorithm = HashAlgorithm.SHA1
    window: int = DEFAULT_WINDOW

    def validate(self) -> "OTPParameters":
        check_range("digits", self.digits, DIGITS_RANGE)
        check_range("interval", self.interval, INTERVAL_RANGE)
        check_range("window", self.window, WINDOW_RANGE)
        if not isinstance(self.algorithm, HashAlgorithm):
            raise InvalidParameters("algorithm must be a HashAlgorithm")
        return self

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "OTPParameters":
        """
        Builds validated parameters from a loosely typed record, e.g. one row of
        an inventory import. Missing keys fall back to the defaults, numbers may
        be strings, and ``period``/``time_step``/``digest`` are accepted as
        aliases.
        """
        kwargs = {}
        try:
            if data.get("digits") is not None:
                kwargs["digits"] = int(data["digits"])
            for key in ("interval", "period", "time_step"):
                if data.get(key) is not None:
                    kwargs["interval"] = int(data[key])
                    break
            if data.get("window") is not None:
                kwargs["window"] = int(data["window"])
        except (TypeError, ValueError) as e:
            raise InvalidParameters("Non-numeric OTP parameter: {}".format(e)) from e
        algorithm = data.get("algorithm", data.get("digest"))
        kwargs["algorithm"] = HashAlgorithm.parse(algorithm)
        return cls(**kwargs).validate()


@dataclass(frozen=True)
class OTPResult:
    """One computed code and the counter step it belongs to."""

    code: str
    counter: int
    valid_from: int
    valid_until: int
    is_current: bool

    @property
    def start(self) -> datetime.datetime:
        return datetime.datetime.fromtimestamp(self.valid_from, tz=datetime.timezone.utc)

    @property
    def end(self) -> datetime.datetime:
        return datetime.datetime.fromtimestamp(self.valid_until, tz=datetime.timezone.utc)

    def __str__(self) -> str:
        return self.code


def unix_time(for_time: Union[int, float, datetime.datetime]) -> int:
    """
    Whole Unix seconds for an int, float or datetime.

    A naive datetime is taken as local time, an aware one is converted to UTC.
    """
    if isinstance(for_time, datetime.datetime):
        if for_time.tzinfo is None:
            return int(for_time.timestamp())
        return calendar.timegm(for_time.utctimetuple())
    return int(for_time)
