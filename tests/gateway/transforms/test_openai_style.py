"""Tests for the shared OpenAI-style conversion helpers."""

from __future__ import annotations

import logging

import pytest

from llmbridge.gateway.transforms import openai_style

log = logging.getLogger("tests.openai_style")


class TestFinishReason:
    @pytest.mark.parametrize(
        "reason,expected",
        [
            ("stop", "end_turn"),
            ("length", "max_tokens"),
            ("content_filter", "stop_sequence"),
            ("tool_calls", "tool_use"),
            ("function_call", "tool_use"),
        ],
    )
    def test_known(self, reason, expected):
        assert openai_style.map_finish_reason(reason) == expected

    @pytest.mark.parametrize("reason", [None, "", "eos", "STOP"])
    def test_unknown_or_missing_is_none(self, reason):
        assert openai_style.map_finish_reason(reason) is None


class TestModelMapping:
    def test_mapped(self):
        assert openai_style.map_model("a", {"a": "b"}, "d") == "b"

    @pytest.mark.parametrize("model", [None, "", "zzz", 42])
    def test_default(self, model):
        assert openai_style.map_model(model, {"a": "b"}, "d") == "d"


class TestFlattenText:
    def test_string(self):
        assert openai_style.flatten_text("plain") == "plain"

    def test_parts(self):
        content = [
            {"type": "text", "text": "one"},
            {"type": "image", "source": {}},
            {"type": "text", "text": "two"},
        ]
        assert openai_style.flatten_text(content) == "one\ntwo"

    def test_null_and_non_string_text(self):
        content = [
            {"type": "text", "text": None},
            {"type": "text", "text": 5},
            {"type": "text", "text": "x"},
        ]

        assert openai_style.flatten_text(content) == "\n\nx"

    def test_part_text(self):
        assert openai_style.part_text({"type": "text"}) == ""
        assert openai_style.part_text({"type": "text", "text": "t"}) == "t"

    def test_other_values(self):
        assert openai_style.flatten_text(None) == ""
        assert openai_style.flatten_text([]) == ""


class TestImageUrl:
    def test_data_uri(self):
        part = {"type": "image_url", "image_url": {"url": "data:image/webp;base64,UklGR"}}

        assert openai_style.image_url_to_part(part) == {
            "type": "image",
            "source": {"type": "base64", "media_type": "image/webp", "data": "UklGR"},
        }

    def test_data_uri_without_mime(self):
        part = {"type": "image_url", "image_url": {"url": "data:;base64,AAAA"}}

        assert openai_style.image_url_to_part(part)["source"]["media_type"] == "image/jpeg"

    def test_plain_string_url(self):
        part = {"type": "image_url", "image_url": "https://img.test/a.jpg"}

        assert openai_style.image_url_to_part(part) == {
            "type": "image",
            "source": {"type": "url", "url": "https://img.test/a.jpg"},
        }


class TestSseLine:
    def test_invalid_json_passes_through(self):
        line = "data: {not valid json"

        assert openai_style.transform_sse_line(line, log) == line

    def test_invalid_shape_passes_through(self):
        line = 'data: {"choices": "nope"}'

        assert openai_style.transform_sse_line(line, log) == line

    def test_event_line_passes_through(self):
        assert openai_style.transform_sse_line("event: ping", log) == "event: ping"

    def test_missing_index_defaults_to_zero(self):
        out = openai_style.transform_sse_line('data: {"choices":[{"delta":{"content":"x"}}]}', log)

        assert out == 'data: {"choices":[{"index":0,"delta":{"content":"x"},"finish_reason":null}]}\n\n'

    def test_non_ascii_kept(self):
        out = openai_style.transform_sse_line('data: {"choices":[{"delta":{"content":"héllo"}}]}', log)

        assert "héllo" in out


class TestCanonicalResponse:
    def test_images_dropped_unless_allowed(self):
        raw = {
            "choices": [
                {
                    "message": {
                        "content": [
                            {"type": "text", "text": "t"},
                            {"type": "image_url", "image_url": {"url": "https://x.test/i.png"}},
                        ]
                    }
                }
            ]
        }

        text_only = openai_style.to_canonical_response(raw, default_model="m", log=log)
        with_images = openai_style.to_canonical_response(
            raw, default_model="m", log=log, allow_images=True
        )

        assert text_only["content"] == [{"type": "text", "text": "t"}]
        assert len(with_images["content"]) == 2

    def test_only_first_choice_read(self):
        raw = {
            "choices": [
                {"message": {"content": "first"}, "finish_reason": "stop"},
                {"message": {"content": "second"}, "finish_reason": "length"},
            ]
        }

        result = openai_style.to_canonical_response(raw, default_model="m", log=log)

        assert result["content"] == [{"type": "text", "text": "first"}]
        assert result["stop_reason"] == "end_turn"

    def test_negative_usage_clamped(self):
        raw = {"usage": {"prompt_tokens": -1, "completion_tokens": 2}}

        result = openai_style.to_canonical_response(raw, default_model="m", log=log)

        assert result["usage"] == {"input_tokens": 0, "output_tokens": 2}

    def test_invalid_payload_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = openai_style.to_canonical_response(
                {"choices": "broken"}, default_model="m", log=log
            )

        assert result["content"] == []
        assert result["model"] == "m"
        assert "Malformed OpenAIChatPayload" in caplog.text
