"""Tests for the canonical error helpers."""

from __future__ import annotations

import pytest

from llmbridge.gateway.errors import (
    ERROR_KINDS,
    UpstreamError,
    UpstreamFailure,
    describe_failure,
    error_envelope,
    error_kind_for_status,
)


class TestErrorKindForStatus:
    @pytest.mark.parametrize(
        "status,expected",
        [
            (401, "authentication_error"),
            (403, "permission_error"),
            (404, "invalid_request_error"),
            (429, "rate_limit_error"),
            (400, "api_error"),
            (500, "api_error"),
            (502, "api_error"),
        ],
    )
    def test_table(self, status, expected):
        assert error_kind_for_status(status) == expected

    def test_overrides(self):
        assert error_kind_for_status(400, {400: "invalid_request_error"}) == "invalid_request_error"
        assert error_kind_for_status(401, {400: "invalid_request_error"}) == "authentication_error"

    def test_kinds(self):
        assert ERROR_KINDS == {
            "authentication_error",
            "permission_error",
            "invalid_request_error",
            "rate_limit_error",
            "content_policy_error",
            "api_error",
        }


class TestErrorEnvelope:
    def test_minimal(self):
        assert error_envelope("api_error", "boom") == {
            "type": "error",
            "error": {"type": "api_error", "message": "boom"},
        }

    def test_code_and_extras(self):
        result = error_envelope("rate_limit_error", "slow", "429", ratelimit={"n": 1}, details=None)

        assert result["error"] == {
            "type": "rate_limit_error",
            "message": "slow",
            "code": "429",
            "ratelimit": {"n": 1},
        }


class TestDescribeFailure:
    def test_error_body(self):
        failure = describe_failure({"error": {"type": "x", "message": "m"}, "status": 400})

        assert failure.error == {"type": "x", "message": "m"}
        assert failure.status == 400

    def test_status_as_string(self):
        assert describe_failure({"status": "503"}).status == 503

    def test_status_code_key(self):
        assert describe_failure({"status_code": 401}).status == 401

    def test_json_text(self):
        failure = describe_failure('{"error": {"message": "bad"}}')

        assert failure.error == {"message": "bad"}

    def test_json_bytes(self):
        failure = describe_failure(b'{"error": {"message": "bad"}}')

        assert failure.error == {"message": "bad"}

    def test_flat_string_error(self):
        failure = describe_failure({"error": "quota exceeded"})

        assert failure.error is None
        assert failure.message == "quota exceeded"

    def test_upstream_error(self):
        err = UpstreamError("HTTP 429", 429, {"error": {"message": "slow down"}})

        failure = describe_failure(err)

        assert failure.status == 429
        assert failure.error == {"message": "slow down"}
        assert failure.message == "HTTP 429"

    def test_upstream_error_unparseable_body(self):
        failure = describe_failure(UpstreamError("HTTP 502", 502, "<html>Bad Gateway</html>"))

        assert failure.status == 502
        assert failure.error is None

    def test_exception_with_response_status(self):
        class Response:
            status_code = 403

        class ClientError(Exception):
            response = Response()

        failure = describe_failure(ClientError("forbidden"))

        assert failure.status == 403
        assert failure.message == "forbidden"

    def test_exception_with_reason(self):
        class ResponseError(Exception):
            status = 404
            reason = "Not Found"

        failure = describe_failure(ResponseError())

        assert failure.status == 404
        assert failure.status_text == "Not Found"
        assert failure.message == "ResponseError"

    def test_none(self):
        assert describe_failure(None) == UpstreamFailure()

    def test_arbitrary_object(self):
        assert describe_failure(3.5).message == "3.5"
