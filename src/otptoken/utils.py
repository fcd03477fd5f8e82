import unicodedata
from hmac import compare_digest
from typing import Dict, Optional, Union
from urllib.parse import quote, urlencode, urlparse

URI_DEFAULTS = {"algorithm": "SHA1", "digits": 6, "period": 30}


def _extra_params(params: Dict[str, object]) -> Dict[str, str]:
    extra = {}
    for key, value in params.items():
        if not isinstance(value, str):
            raise ValueError("All otpauth uri parameters must be strings")
        if key == "image":
            image_uri = urlparse(value)
            if image_uri.scheme != "https" or not image_uri.netloc or not image_uri.path:
                raise ValueError("{} is not a valid url".format(value))
        extra[key] = value
    return extra


def build_uri(
    secret: str,
    name: str,
    initial_count: Optional[int] = None,
    issuer: Optional[str] = None,
    algorithm: Optional[str] = None,
    digits: Optional[int] = None,
    period: Optional[int] = None,
    **kwargs,
) -> str:
    """
    Returns the provisioning URI for a token; works for either TOTP or HOTP.

    See also:
        https://github.com/google/google-authenticator/wiki/Key-Uri-Format

    :param secret: Base32 secret; trailing padding is dropped since the
        otpauth scheme does not use it
    :param name: name of the account
    :param initial_count: starting counter value. Its presence makes this an
        HOTP URI, otherwise TOTP is assumed.
    :param issuer: the name of the OTP issuer
    :param algorithm: SHA1, SHA256 or SHA512
    :param digits: the length of the generated code
    :param period: the TOTP time step in seconds
    :param kwargs: other query string parameters, all strings; ``image``
        must be an https URL
    :returns: provisioning uri
    """
    query: Dict[str, Union[int, str]] = {"secret": secret.rstrip("=")}

    label = quote(name)
    if issuer is not None:
        label = "{}:{}".format(quote(issuer), label)
        query["issuer"] = issuer

    # initial_count may be 0 as a valid param
    if initial_count is not None:
        query["counter"] = initial_count

    # only values that differ from the defaults are written
    given = {"algorithm": algorithm.upper() if algorithm else None, "digits": digits, "period": period}
    for key, value in given.items():
        if value is not None and value != URI_DEFAULTS[key]:
            query[key] = value

    query.update(_extra_params(kwargs))

    otp_type = "hotp" if initial_count is not None else "totp"
    return "otpauth://{}/{}?{}".format(otp_type, label, urlencode(query).replace("+", "%20"))


def strings_equal(s1: str, s2: str, normalize: bool = True) -> bool:
    """
    Timing-attack resistant string comparison.

    With ``normalize`` both sides are NFKC-normalised first, so fullwidth
    digits typed on some keyboards compare equal to ASCII ones. Without it
    the strings must match exactly. Only the length leaks through timing.
    """
    if normalize:
        s1 = unicodedata.normalize("NFKC", s1)
        s2 = unicodedata.normalize("NFKC", s2)
    return compare_digest(s1.encode("utf-8"), s2.encode("utf-8"))
