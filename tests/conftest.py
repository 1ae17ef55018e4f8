"""Pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from llmbridge.gateway.config import ProviderConfig
from llmbridge.gateway.transforms.registry import TransformerRegistry, create_registry


@pytest.fixture
def registry() -> TransformerRegistry:
    return create_registry()


@pytest.fixture
def anthropic_provider() -> ProviderConfig:
    return ProviderConfig(
        id="anthropic-main",
        name="Anthropic",
        type="anthropic",
        api_base_url="https://api.anthropic.com",
        api_key="sk-ant-test",
        models=["claude-3-5-sonnet-20241022"],
        transformer="anthropic",
    )


@pytest.fixture
def deepseek_provider() -> ProviderConfig:
    return ProviderConfig(
        id="deepseek-main",
        name="DeepSeek",
        type="deepseek",
        api_base_url="https://api.deepseek.com/v1",
        api_key="sk-deepseek-test",
        models=["deepseek-chat"],
        transformer="deepseek",
    )


@pytest.fixture
def openrouter_provider() -> ProviderConfig:
    return ProviderConfig(
        id="openrouter-main",
        name="OpenRouter",
        type="openrouter",
        api_base_url="https://openrouter.ai/api/v1",
        api_key="sk-or-v1-test",
        models=["anthropic/claude-3.5-sonnet"],
        transformer="openrouter",
    )


@pytest.fixture
def gemini_provider() -> ProviderConfig:
    return ProviderConfig(
        id="gemini-main",
        name="Google Gemini",
        type="gemini",
        api_base_url="https://generativelanguage.googleapis.com/v1beta",
        api_key="AIza-test",
        models=["gemini-1.5-pro"],
        transformer="gemini",
    )


@pytest.fixture
def simple_request() -> dict:
    """Minimal canonical request."""
    return {
        "model": "claude-3-5-sonnet-20241022",
        "messages": [{"role": "user", "content": "hi"}],
        "max_tokens": 8192,
        "stream": False,
    }


@pytest.fixture
def multimodal_request() -> dict:
    """Canonical request with a text part and an image part."""
    return {
        "model": "claude-3-5-sonnet-20241022",
        "max_tokens": 1024,
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "a"},
                    {
                        "type": "image",
                        "source": {"type": "base64", "media_type": "image/png", "data": "iVBORw0"},
                    },
                ],
            }
        ],
    }
