"""Tests for the generate/verify operations."""

import logging

import pytest

import otptoken
from otptoken import engine
from otptoken.codec import EncodedSecret, SecretEncoding
from otptoken.exceptions import FormatError, InvalidParameters, InvalidSecret
from otptoken.models import HashAlgorithm, OTPParameters, OTPResult

RFC_TEXT_SECRET = "12345678901234567890"
RFC_SECRET = EncodedSecret(RFC_TEXT_SECRET, SecretEncoding.TEXT)


class TestGenerateOTP:
    """Tests for the flat generate_otp facade."""

    def test_rfc6238_vector(self):
        code = otptoken.generate_otp(RFC_TEXT_SECRET, SecretEncoding.TEXT, digits=8, for_time=59)
        assert code == "94287082"

    def test_leading_zero_vector(self):
        code = otptoken.generate_otp(RFC_TEXT_SECRET, "text", digits=8, for_time=1111111109)
        assert code == "07081804"
        assert len(code) == 8

    def test_hex_and_base32_agree_with_text(self):
        hex_secret = RFC_TEXT_SECRET.encode("ascii").hex()
        b32_secret = otptoken.encode_to_base32(RFC_TEXT_SECRET, SecretEncoding.TEXT)
        expected = otptoken.generate_otp(RFC_TEXT_SECRET, SecretEncoding.TEXT, for_time=1234567890)
        assert otptoken.generate_otp(hex_secret, SecretEncoding.HEX, for_time=1234567890) == expected
        assert otptoken.generate_otp(b32_secret, SecretEncoding.BASE32, for_time=1234567890) == expected

    def test_algorithm_by_name(self):
        code = otptoken.generate_otp(
            "12345678901234567890123456789012", "text", digits=8, algorithm="SHA256", for_time=59
        )
        assert code == "46119246"

    def test_idempotent_for_same_time(self):
        first = otptoken.generate_otp(RFC_TEXT_SECRET, "text", for_time=1000)
        second = otptoken.generate_otp(RFC_TEXT_SECRET, "text", for_time=1019)
        assert first == second

    def test_window_returns_results(self):
        results = otptoken.generate_otp(RFC_TEXT_SECRET, "text", for_time=150, window=2)
        assert isinstance(results, list)
        assert [r.code for r in results] == ["338314", "254676", "287922"]

    def test_defaults_to_now(self, monkeypatch):
        monkeypatch.setattr("otptoken.engine.time.time", lambda: 150.0)
        assert otptoken.generate_otp(RFC_TEXT_SECRET, "text") == "254676"

    def test_window_shortened_at_epoch(self):
        results = otptoken.generate_otp(RFC_TEXT_SECRET, "text", for_time=0, window=3)
        assert [r.counter for r in results] == [0, 1, 2]
        assert results[0].is_current
        assert [r.is_current for r in results].count(True) == 1


class TestGenerateCodes:
    """Tests for the windowed result list."""

    def test_window_size_and_order(self):
        results = engine.generate_codes(RFC_SECRET, OTPParameters(window=3), for_time=3000)
        assert len(results) == 5
        assert [r.counter for r in results] == [98, 99, 100, 101, 102]
        assert [r.is_current for r in results].count(True) == 1
        assert results[2].is_current

    def test_interval_bounds(self):
        results = engine.generate_codes(RFC_SECRET, OTPParameters(interval=60), for_time=125)
        assert len(results) == 1
        result = results[0]
        assert isinstance(result, OTPResult)
        assert (result.counter, result.valid_from, result.valid_until) == (2, 120, 180)
        assert result.start.timestamp() == 120
        assert str(result) == result.code

    def test_explicit_counter(self):
        results = engine.generate_codes(
            "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", OTPParameters(window=2), counter=1
        )
        assert [r.code for r in results] == ["755224", "287082", "359152"]

    def test_string_secret_with_encoding(self):
        results = engine.generate_codes("3132333435363738393031323334353637383930", counter=0, encoding="hex")
        assert results[0].code == "755224"

    def test_negative_counter(self):
        with pytest.raises(InvalidParameters):
            engine.generate_codes(RFC_SECRET, counter=-1)

    def test_encoding_conflicts_with_encoded_secret(self):
        with pytest.raises(InvalidParameters):
            engine.generate_codes(RFC_SECRET, counter=0, encoding=SecretEncoding.HEX)

    def test_encoding_matching_encoded_secret(self):
        results = engine.generate_codes(RFC_SECRET, counter=0, encoding="text")
        assert results[0].code == "755224"

    @pytest.mark.parametrize(
        "params",
        [
            OTPParameters(digits=5),
            OTPParameters(digits=11),
            OTPParameters(interval=9),
            OTPParameters(interval=301),
            OTPParameters(window=0),
            OTPParameters(window=11),
            OTPParameters(digits=6.0),
            OTPParameters(interval=30.5),
            OTPParameters(window=True),
        ],
    )
    def test_invalid_parameters(self, params):
        with pytest.raises(InvalidParameters):
            engine.generate_codes(RFC_SECRET, params, for_time=59)

    def test_parameters_checked_before_secret(self):
        with pytest.raises(InvalidParameters):
            engine.generate_codes(EncodedSecret("", SecretEncoding.TEXT), OTPParameters(digits=4), for_time=59)

    @pytest.mark.parametrize(
        "secret",
        [
            EncodedSecret("", SecretEncoding.TEXT),
            EncodedSecret("", SecretEncoding.BASE32),
            EncodedSecret("abc", SecretEncoding.HEX),
            EncodedSecret("zz", SecretEncoding.HEX),
            EncodedSecret("JBSW1Y3D", SecretEncoding.BASE32),
        ],
    )
    def test_invalid_secret(self, secret):
        with pytest.raises(InvalidSecret):
            engine.generate_codes(secret, for_time=59)

    def test_logs_without_secret(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="otptoken.engine"):
            engine.generate_codes(RFC_SECRET, OTPParameters(window=2), for_time=59)
        assert "3 code(s)" in caplog.text
        assert RFC_TEXT_SECRET not in caplog.text


class TestVerify:
    """Tests for code verification."""

    def test_current_code(self):
        assert otptoken.verify_otp(RFC_TEXT_SECRET, "94287082", "text", digits=8, for_time=59)

    def test_previous_step_needs_window(self):
        previous = otptoken.generate_otp(RFC_TEXT_SECRET, "text", for_time=150 - 30)
        assert otptoken.verify_otp(RFC_TEXT_SECRET, previous, "text", window=2, for_time=150)
        assert not otptoken.verify_otp(RFC_TEXT_SECRET, previous, "text", window=1, for_time=150)

    def test_wrong_length_is_false(self):
        assert not otptoken.verify_otp(RFC_TEXT_SECRET, "4287082", "text", digits=8, for_time=59)
        assert not otptoken.verify_otp(RFC_TEXT_SECRET, "094287082", "text", digits=8, for_time=59)

    def test_leading_zero_compared_as_string(self):
        assert otptoken.verify_otp(RFC_TEXT_SECRET, "07081804", "text", digits=8, for_time=1111111109)
        assert not otptoken.verify_otp(RFC_TEXT_SECRET, "7081804", "text", digits=8, for_time=1111111109)

    def test_fullwidth_digits_rejected(self):
        fullwidth = "９４２８７０８２"
        assert not otptoken.verify_otp(RFC_TEXT_SECRET, fullwidth, "text", digits=8, for_time=59)

    def test_wrong_code(self):
        assert not otptoken.verify_otp(RFC_TEXT_SECRET, "00000000", "text", digits=8, for_time=59)

    def test_with_parameters_object(self):
        params = OTPParameters(digits=8, algorithm=HashAlgorithm.SHA512)
        secret = EncodedSecret("1234567890" * 6 + "1234", SecretEncoding.TEXT)
        assert engine.verify(secret, "90693936", params, for_time=59)

    def test_counter_mode(self):
        assert engine.verify("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", "969429", counter=3)

    def test_invalid_secret_still_raises(self):
        with pytest.raises(InvalidSecret):
            otptoken.verify_otp("", "123456", "text", for_time=59)

    def test_invalid_parameters_raise(self):
        with pytest.raises(InvalidParameters):
            otptoken.verify_otp(RFC_TEXT_SECRET, "123456", "text", window=20, for_time=59)


class TestParameters:
    """Tests for OTPParameters and HashAlgorithm."""

    def test_defaults(self):
        params = OTPParameters()
        assert (params.digits, params.interval, params.algorithm, params.window) == (6, 30, HashAlgorithm.SHA1, 1)
        assert params.validate() is params

    def test_from_mapping(self):
        params = OTPParameters.from_mapping({"digits": "8", "period": "60", "algorithm": "sha-256", "window": 2})
        assert params == OTPParameters(digits=8, interval=60, algorithm=HashAlgorithm.SHA256, window=2)

    def test_from_mapping_defaults(self):
        assert OTPParameters.from_mapping({}) == OTPParameters()

    def test_from_mapping_time_step_alias(self):
        assert OTPParameters.from_mapping({"time_step": 45}).interval == 45

    def test_from_mapping_rejects_garbage(self):
        with pytest.raises(InvalidParameters):
            OTPParameters.from_mapping({"digits": "six"})
        with pytest.raises(InvalidParameters):
            OTPParameters.from_mapping({"interval": 5})
        with pytest.raises(InvalidParameters):
            OTPParameters.from_mapping({"algorithm": "MD5"})

    def test_boolean_rejected(self):
        with pytest.raises(InvalidParameters):
            OTPParameters(window=True).validate()

    @pytest.mark.parametrize("name", ["SHA1", "sha1", "Sha-1", "sha_1"])
    def test_algorithm_names(self, name):
        assert HashAlgorithm.parse(name) is HashAlgorithm.SHA1

    def test_algorithm_default(self):
        assert HashAlgorithm.parse(None) is HashAlgorithm.SHA1


class TestIntervalRemaining:
    """Tests for the seconds-left helper."""

    def test_remaining(self):
        assert engine.interval_remaining(30, for_time=59) == 1
        assert engine.interval_remaining(30, for_time=60) == 30


def test_unknown_encoding_name():
    with pytest.raises(FormatError):
        otptoken.generate_otp(RFC_TEXT_SECRET, "base64", for_time=59)
