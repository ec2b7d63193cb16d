"""
LLM provider strategies.

Each provider wraps an Agent Framework chat client and exposes the
``ModelProvider`` protocol. ``resolve_provider()`` picks exactly one of
them from the available credentials; it runs once at startup.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from agent_framework import ChatAgent
from config.settings import Settings
from entities.shared.errors import ProviderConfigurationError

logger = logging.getLogger(__name__)

ProviderName = Literal["openai", "anthropic", "azure_ai"]

# Static preference order used when LLM_PROVIDER is not set
PROVIDER_PREFERENCE: tuple[ProviderName, ...] = ("openai", "anthropic", "azure_ai")

GENERATION_TEMPERATURE = 0.1
GENERATION_MAX_TOKENS = 1000
NARRATION_TEMPERATURE = 0.7
NARRATION_MAX_TOKENS = 300


class AgentProvider:
    """``ModelProvider`` backed by Agent Framework chat clients.

    A fresh ``ChatAgent`` is built per call because the system prompt
    carries the per-request schema snapshot.

    Args:
        name: Provider identifier.
        chat_client: Client used for SQL generation.
        narration_client: Client used for result narration (often a
            smaller model). Defaults to ``chat_client``.
    """

    def __init__(
        self,
        name: ProviderName,
        chat_client: Any,  # noqa: ANN401
        narration_client: Any | None = None,  # noqa: ANN401
    ) -> None:
        self.name = name
        self._chat_client = chat_client
        self._narration_client = narration_client or chat_client

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Run the SQL generation prompt pair and return the reply text."""
        agent = ChatAgent(
            name="sql-generator-agent",
            instructions=system_prompt,
            chat_client=self._chat_client,
            temperature=GENERATION_TEMPERATURE,
            max_tokens=GENERATION_MAX_TOKENS,
        )
        result = await agent.run(user_prompt)
        return result.text or ""

    async def narrate(self, prompt: str) -> str:
        """Run a single-turn narration prompt and return the reply text."""
        agent = ChatAgent(
            name="result-narrator-agent",
            chat_client=self._narration_client,
            temperature=NARRATION_TEMPERATURE,
            max_tokens=NARRATION_MAX_TOKENS,
        )
        result = await agent.run(prompt)
        return result.text or ""


def _create_openai_provider(settings: Settings) -> AgentProvider:
    from agent_framework.openai import OpenAIChatClient  # noqa: PLC0415

    return AgentProvider(
        "openai",
        OpenAIChatClient(api_key=settings.openai_api_key, model_id=settings.openai_model),
        OpenAIChatClient(
            api_key=settings.openai_api_key, model_id=settings.openai_narration_model
        ),
    )


def _create_anthropic_provider(settings: Settings) -> AgentProvider:
    from agent_framework.anthropic import AnthropicClient  # noqa: PLC0415

    return AgentProvider(
        "anthropic",
        AnthropicClient(api_key=settings.anthropic_api_key, model_id=settings.anthropic_model),
        AnthropicClient(
            api_key=settings.anthropic_api_key, model_id=settings.anthropic_narration_model
        ),
    )


def _create_azure_ai_provider(settings: Settings) -> AgentProvider:
    from agent_framework_azure_ai import AzureAIClient  # noqa: PLC0415
    from azure.identity.aio import DefaultAzureCredential  # noqa: PLC0415

    credential = (
        DefaultAzureCredential(managed_identity_client_id=settings.azure_client_id)
        if settings.azure_client_id
        else DefaultAzureCredential()
    )
    narration_model = settings.azure_ai_narration_model or settings.azure_ai_model_deployment_name

    return AgentProvider(
        "azure_ai",
        AzureAIClient(
            project_endpoint=settings.azure_ai_project_endpoint,
            credential=credential,
            model_deployment_name=settings.azure_ai_model_deployment_name,
            use_latest_version=True,
        ),
        AzureAIClient(
            project_endpoint=settings.azure_ai_project_endpoint,
            credential=credential,
            model_deployment_name=narration_model,
            use_latest_version=True,
        ),
    )


_FACTORIES = {
    "openai": _create_openai_provider,
    "anthropic": _create_anthropic_provider,
    "azure_ai": _create_azure_ai_provider,
}


def _has_credentials(name: ProviderName, settings: Settings) -> bool:
    if name == "openai":
        return bool(settings.openai_api_key)
    if name == "anthropic":
        return bool(settings.anthropic_api_key)
    return bool(settings.azure_ai_project_endpoint)


def select_provider_name(settings: Settings) -> ProviderName:
    """Decide which provider to use from configuration alone.

    ``LLM_PROVIDER`` pins a provider explicitly; otherwise the first
    provider in ``PROVIDER_PREFERENCE`` with credentials wins.

    Raises:
        ProviderConfigurationError: If the pinned provider is unknown or
            lacks credentials, or no provider has credentials.
    """
    pinned = (settings.llm_provider or "").strip().lower()
    if pinned:
        if pinned not in _FACTORIES:
            raise ProviderConfigurationError(
                f"Unknown LLM_PROVIDER '{pinned}'. Expected one of: {', '.join(_FACTORIES)}"
            )
        if not _has_credentials(pinned, settings):  # type: ignore[arg-type]
            raise ProviderConfigurationError(
                f"LLM_PROVIDER is '{pinned}' but its credentials are not configured"
            )
        return pinned  # type: ignore[return-value]

    for name in PROVIDER_PREFERENCE:
        if _has_credentials(name, settings):
            return name

    raise ProviderConfigurationError(
        "No AI provider credentials found. Set OPENAI_API_KEY, ANTHROPIC_API_KEY, "
        "or AZURE_AI_PROJECT_ENDPOINT."
    )


def resolve_provider(settings: Settings) -> AgentProvider:
    """Build the single provider this process will use.

    Args:
        settings: Centralised application configuration.

    Returns:
        The configured provider.

    Raises:
        ProviderConfigurationError: If no provider can be configured.
    """
    name = select_provider_name(settings)
    logger.info("Using LLM provider: %s", name)
    return _FACTORIES[name](settings)
