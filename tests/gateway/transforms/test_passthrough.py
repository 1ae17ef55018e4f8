"""Tests for PassthroughTransformer."""

from __future__ import annotations

import copy

from llmbridge.gateway.errors import UpstreamError
from llmbridge.gateway.transforms.passthrough import PASSTHROUGH_NAME, PassthroughTransformer


class TestPassthroughIdentity:
    """Requests, responses and stream units pass through unchanged."""

    def test_name(self):
        assert PassthroughTransformer().name == PASSTHROUGH_NAME == "anthropic"

    def test_request_is_equal_copy(self, anthropic_provider):
        """transform_request returns a deep copy equal to the input."""
        request = {
            "model": "claude-3-5-sonnet-20241022",
            "messages": [{"role": "user", "content": [{"type": "text", "text": "hi"}]}],
            "max_tokens": 100,
            "metadata": {"user_id": "u-1"},
            "x_custom": [1, 2, 3],
        }

        result = PassthroughTransformer().transform_request(request, anthropic_provider)

        assert result == request
        assert result is not request
        assert result["messages"] is not request["messages"]

    def test_request_copy_is_independent(self, anthropic_provider):
        """Mutating the result leaves the caller's request untouched."""
        request = {"model": "m", "messages": [{"role": "user", "content": "hi"}], "max_tokens": 5}
        original = copy.deepcopy(request)

        result = PassthroughTransformer().transform_request(request, anthropic_provider)
        result["messages"][0]["content"] = "changed"

        assert request == original

    def test_response_identity(self, anthropic_provider):
        response = {
            "id": "msg_01",
            "type": "message",
            "role": "assistant",
            "content": [{"type": "text", "text": "Hello"}],
            "model": "claude-3-5-sonnet-20241022",
            "stop_reason": "end_turn",
            "stop_sequence": None,
            "usage": {"input_tokens": 3, "output_tokens": 1},
        }

        assert PassthroughTransformer().transform_response(response, anthropic_provider) == response

    def test_stream_chunk_unchanged(self, anthropic_provider):
        transformer = PassthroughTransformer()
        for line in ("event: message_start", 'data: {"type":"ping"}', "data: [DONE]", ": keep"):
            assert transformer.transform_stream_chunk(line, anthropic_provider) == line


class TestPassthroughErrors:
    """Anthropic-format errors keep or fold their type."""

    def test_canonical_type_kept(self, anthropic_provider):
        body = {"type": "error", "error": {"type": "rate_limit_error", "message": "slow down"}}

        result = PassthroughTransformer().transform_error(body, anthropic_provider)

        assert result == {
            "type": "error",
            "error": {"type": "rate_limit_error", "message": "slow down"},
        }

    def test_overloaded_folds_to_api_error(self, anthropic_provider):
        body = {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}}

        result = PassthroughTransformer().transform_error(body, anthropic_provider)

        assert result["error"]["type"] == "api_error"
        assert result["error"]["message"] == "Overloaded"

    def test_not_found_folds_to_invalid_request(self, anthropic_provider):
        body = {"error": {"type": "not_found_error", "message": "model: nope"}}

        result = PassthroughTransformer().transform_error(body, anthropic_provider)

        assert result["error"]["type"] == "invalid_request_error"

    def test_malformed_type_keeps_message(self, anthropic_provider):
        """A non-string error type is ignored instead of breaking the lookup."""
        body = {"error": {"type": ["x"], "message": "m"}}

        result = PassthroughTransformer().transform_error(body, anthropic_provider)

        assert result == {"type": "error", "error": {"type": "api_error", "message": "m"}}

    def test_non_string_message_replaced(self, anthropic_provider):
        body = {"error": {"type": "rate_limit_error", "message": {"detail": "slow"}}}

        result = PassthroughTransformer().transform_error(body, anthropic_provider)

        assert result["error"] == {"type": "rate_limit_error", "message": "Upstream API error"}

    def test_upstream_error_with_body(self, anthropic_provider):
        err = UpstreamError(
            "HTTP 401",
            401,
            '{"type":"error","error":{"type":"authentication_error","message":"invalid x-api-key"}}',
        )

        result = PassthroughTransformer().transform_error(err, anthropic_provider)

        assert result["error"] == {"type": "authentication_error", "message": "invalid x-api-key"}

    def test_exception_without_status(self, anthropic_provider):
        result = PassthroughTransformer().transform_error(
            ConnectionResetError("peer reset"), anthropic_provider
        )

        assert result == {"type": "error", "error": {"type": "api_error", "message": "peer reset"}}


class TestPassthroughConfig:
    def test_validate_requires_url_and_key(self):
        result = PassthroughTransformer().validate_config({"apiBaseUrl": "", "apiKey": ""})

        assert not result.valid
        assert len(result.errors) == 2

    def test_any_anthropic_compatible_url_is_valid(self):
        result = PassthroughTransformer().validate_config(
            {"apiBaseUrl": "https://open.bigmodel.cn/api/anthropic", "apiKey": "abc"}
        )

        assert result.valid

    def test_default_config(self):
        config = PassthroughTransformer().get_default_config()

        assert config["transformer"] == "anthropic"
        assert config["api_base_url"] == "https://api.anthropic.com"
        assert config["timeout"] == 60000
