"""Domain exceptions raised by the pipeline components."""


class ProviderConfigurationError(RuntimeError):
    """No usable LLM provider could be configured at startup."""


class ModelInvocationError(RuntimeError):
    """A model call failed (network, auth, quota, or timeout).

    Args:
        provider: Name of the provider that was called.
        message: Short description of the failure.
    """

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
