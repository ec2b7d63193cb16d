"""Unit tests for provider selection and ModelInvoker.

Tests cover the static preference order, pinned providers, missing
credentials, timeouts, and provider errors.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from config.settings import Settings
from conftest import FakeModelProvider
from entities.model_invoker import AgentProvider, ModelInvoker, select_provider_name
from entities.shared.errors import ModelInvocationError, ProviderConfigurationError

# ── Provider selection ───────────────────────────────────────────────────


class TestSelectProviderName:
    """The first provider with credentials wins unless one is pinned."""

    def test_no_credentials_raises(self, test_settings: Settings) -> None:
        with pytest.raises(ProviderConfigurationError, match="No AI provider"):
            select_provider_name(test_settings)

    def test_openai_preferred(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(
            update={"openai_api_key": "sk-test", "anthropic_api_key": "ak-test"}
        )
        assert select_provider_name(settings) == "openai"

    def test_anthropic_when_no_openai(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(
            update={"anthropic_api_key": "ak-test", "azure_ai_project_endpoint": "https://x"}
        )
        assert select_provider_name(settings) == "anthropic"

    def test_azure_ai_last(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(update={"azure_ai_project_endpoint": "https://x"})
        assert select_provider_name(settings) == "azure_ai"

    def test_pinned_provider_overrides_order(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(
            update={
                "llm_provider": "Anthropic",
                "openai_api_key": "sk-test",
                "anthropic_api_key": "ak-test",
            }
        )
        assert select_provider_name(settings) == "anthropic"

    def test_pinned_provider_without_credentials(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(
            update={"llm_provider": "anthropic", "openai_api_key": "sk-test"}
        )
        with pytest.raises(ProviderConfigurationError, match="credentials"):
            select_provider_name(settings)

    def test_unknown_pinned_provider(self, test_settings: Settings) -> None:
        settings = test_settings.model_copy(update={"llm_provider": "gemini"})
        with pytest.raises(ProviderConfigurationError, match="Unknown LLM_PROVIDER"):
            select_provider_name(settings)


# ── ModelInvoker ─────────────────────────────────────────────────────────


class _SlowProvider(FakeModelProvider):
    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        await asyncio.sleep(1)
        return "late"


class TestModelInvoker:
    """One attempt, bounded in time, failures normalized."""

    async def test_returns_reply_text(self) -> None:
        provider = FakeModelProvider(replies=['{"sql": "SELECT 1"}'])
        invoker = ModelInvoker(provider)

        assert await invoker.complete("sys", "user") == '{"sql": "SELECT 1"}'
        assert provider.complete_calls == [("sys", "user")]

    async def test_name_comes_from_provider(self) -> None:
        assert ModelInvoker(FakeModelProvider(name="openai")).name == "openai"

    async def test_timeout_raises_invocation_error(self) -> None:
        invoker = ModelInvoker(_SlowProvider(name="slow"), timeout_seconds=0.01)

        with pytest.raises(ModelInvocationError, match="timed out") as exc_info:
            await invoker.complete("sys", "user")
        assert exc_info.value.provider == "slow"

    async def test_provider_error_is_wrapped(self) -> None:
        provider = FakeModelProvider(error=RuntimeError("rate limited"))
        invoker = ModelInvoker(provider)

        with pytest.raises(ModelInvocationError, match="rate limited"):
            await invoker.complete("sys", "user")
        assert len(provider.complete_calls) == 1

    async def test_narrate_uses_provider(self) -> None:
        provider = FakeModelProvider(narration="Three users found.")
        invoker = ModelInvoker(provider)

        assert await invoker.narrate("describe") == "Three users found."
        assert provider.narrate_calls == ["describe"]


# ── AgentProvider ────────────────────────────────────────────────────────


class TestAgentProvider:
    """Agent Framework wiring for a single provider."""

    async def test_complete_builds_agent_with_system_prompt(self) -> None:
        chat_client = MagicMock()
        agent = MagicMock()
        agent.run = AsyncMock(return_value=MagicMock(text='{"sql": ""}'))

        with patch("entities.model_invoker.providers.ChatAgent", return_value=agent) as agent_cls:
            provider = AgentProvider("openai", chat_client)
            reply = await provider.complete("system text", "user text")

        assert reply == '{"sql": ""}'
        kwargs = agent_cls.call_args.kwargs
        assert kwargs["instructions"] == "system text"
        assert kwargs["chat_client"] is chat_client
        agent.run.assert_awaited_once_with("user text")

    async def test_narrate_uses_narration_client(self) -> None:
        chat_client, narration_client = MagicMock(), MagicMock()
        agent = MagicMock()
        agent.run = AsyncMock(return_value=MagicMock(text=None))

        with patch("entities.model_invoker.providers.ChatAgent", return_value=agent) as agent_cls:
            provider = AgentProvider("anthropic", chat_client, narration_client)
            reply = await provider.narrate("prompt")

        assert reply == ""
        assert agent_cls.call_args.kwargs["chat_client"] is narration_client
