"""Tests for backend error classification."""

import httpx
import pytest

from portocv.errors import (
    AllKeysExhausted,
    ErrorKind,
    GenerationFailed,
    PortoCVError,
    classify_error,
)


class FakeAPIError(Exception):
    def __init__(self, code, message=""):
        self.code = code
        super().__init__(f"{code} {message}".strip())


class FakeHTTPError(Exception):
    def __init__(self, status_code, message=""):
        self.response = type("Resp", (), {"status_code": status_code})()
        super().__init__(message)


class TestClassifyError:
    def test_429_is_quota(self):
        assert classify_error(FakeAPIError(429, "Too Many Requests")) is ErrorKind.QUOTA

    def test_400_is_invalid_credential(self):
        assert classify_error(FakeAPIError(400, "Bad Request")) is ErrorKind.INVALID_CREDENTIAL

    def test_400_wins_over_quota_wording(self):
        exc = FakeAPIError(400, "quota project not set")
        assert classify_error(exc) is ErrorKind.INVALID_CREDENTIAL

    @pytest.mark.parametrize("code", [500, 503])
    def test_server_errors_are_transient(self, code):
        assert classify_error(FakeAPIError(code, "Internal")) is ErrorKind.TRANSIENT

    def test_status_from_response_object(self):
        assert classify_error(FakeHTTPError(429)) is ErrorKind.QUOTA

    def test_quota_message_without_status(self):
        exc = RuntimeError("RESOURCE_EXHAUSTED: quota exceeded for model")
        assert classify_error(exc) is ErrorKind.QUOTA

    def test_invalid_key_message_without_status(self):
        exc = RuntimeError("API key not valid. Please pass a valid API key.")
        assert classify_error(exc) is ErrorKind.INVALID_CREDENTIAL

    def test_network_errors_are_transient(self):
        assert classify_error(httpx.ConnectError("refused")) is ErrorKind.TRANSIENT
        assert classify_error(ConnectionResetError()) is ErrorKind.TRANSIENT
        assert classify_error(TimeoutError()) is ErrorKind.TRANSIENT

    def test_xhr_message_is_transient(self):
        assert classify_error(RuntimeError("xhr error")) is ErrorKind.TRANSIENT

    def test_status_code_in_message_is_transient(self):
        assert classify_error(RuntimeError("got status 500 from upstream")) is ErrorKind.TRANSIENT
        assert classify_error(RuntimeError("503: backend overloaded")) is ErrorKind.TRANSIENT

    def test_digits_inside_larger_numbers_are_not_status_codes(self):
        assert classify_error(RuntimeError("Prompt exceeds 1500 characters")) is ErrorKind.OTHER
        assert classify_error(RuntimeError("token limit 5030 reached")) is ErrorKind.OTHER

    def test_other_status_is_other(self):
        assert classify_error(FakeAPIError(404, "model not found")) is ErrorKind.OTHER

    def test_forbidden_is_other(self):
        assert classify_error(FakeAPIError(403, "permission denied")) is ErrorKind.OTHER

    def test_plain_error_is_other(self):
        assert classify_error(ValueError("boom")) is ErrorKind.OTHER


class TestErrorMessages:
    def test_all_keys_exhausted_message(self):
        assert "add more keys" in str(AllKeysExhausted())

    def test_custom_message_overrides_default(self):
        assert str(PortoCVError("custom")) == "custom"

    def test_generation_failed_names_use_case(self):
        exc = GenerationFailed("portfolio synthesis", "The response was empty.")
        assert exc.use_case == "portfolio synthesis"
        assert str(exc) == "Generation failed during portfolio synthesis. The response was empty."
