"""Tests for TransformerRegistry."""

from __future__ import annotations

import logging

from llmbridge.gateway.config import ProviderConfig
from llmbridge.gateway.transforms.base import Transformer
from llmbridge.gateway.transforms.deepseek import DeepSeekTransformer
from llmbridge.gateway.transforms.gemini import GeminiTransformer
from llmbridge.gateway.transforms.openrouter import OpenRouterTransformer
from llmbridge.gateway.transforms.passthrough import PassthroughTransformer
from llmbridge.gateway.transforms.registry import TransformerRegistry, create_registry


class TestRegistryInit:
    def test_lazy_until_first_use(self):
        registry = TransformerRegistry()

        assert not registry.ready
        registry.resolve("deepseek")
        assert registry.ready

    def test_create_registry_is_ready(self):
        registry = create_registry()

        assert registry.ready
        assert set(registry.list_names()) == {"anthropic", "openrouter", "deepseek", "gemini"}

    def test_builtins_loaded_once(self):
        calls = []

        def builtins():
            calls.append(1)
            return [DeepSeekTransformer()]

        registry = TransformerRegistry(builtins=builtins)
        registry.list_names()
        registry.resolve("deepseek")
        assert "deepseek" in registry

        assert len(calls) == 1

    def test_builtins_satisfy_protocol(self, registry):
        for name in registry.list_names():
            assert isinstance(registry.resolve(name), Transformer)


class TestRegistryResolve:
    def test_known_names(self, registry):
        assert isinstance(registry.resolve("anthropic"), PassthroughTransformer)
        assert isinstance(registry.resolve("openrouter"), OpenRouterTransformer)
        assert isinstance(registry.resolve("deepseek"), DeepSeekTransformer)
        assert isinstance(registry.resolve("gemini"), GeminiTransformer)

    def test_empty_name_is_passthrough(self, registry):
        assert registry.resolve(None).name == "anthropic"
        assert registry.resolve("").name == "anthropic"

    def test_unknown_name_is_passthrough_with_warning(self, registry, caplog):
        with caplog.at_level(logging.WARNING):
            transformer = registry.resolve("nope")

        assert transformer.name == "anthropic"
        assert "'nope' not found" in caplog.text

    def test_same_instance_returned(self, registry):
        assert registry.resolve("gemini") is registry.resolve("gemini")

    def test_resolve_for_provider(self, registry, deepseek_provider):
        assert registry.resolve_for(deepseek_provider).name == "deepseek"
        assert registry.resolve_for(ProviderConfig()).name == "anthropic"

    def test_passthrough_recreated_when_missing(self):
        registry = TransformerRegistry(builtins=lambda: [GeminiTransformer()])

        assert registry.resolve("missing").name == "anthropic"
        assert "anthropic" in registry


class TestRegistryRegister:
    def test_register_new(self, registry):
        custom = DeepSeekTransformer()

        registry.register("my-deepseek", custom)

        assert registry.resolve("my-deepseek") is custom
        assert "my-deepseek" in registry.list_names()

    def test_overwrite_warns(self, registry, caplog):
        replacement = GeminiTransformer()

        with caplog.at_level(logging.WARNING):
            registry.register("gemini", replacement)

        assert registry.resolve("gemini") is replacement
        assert "already registered" in caplog.text

    def test_registries_are_independent(self):
        first = create_registry()
        second = create_registry()

        first.register("extra", PassthroughTransformer())

        assert "extra" in first
        assert "extra" not in second
