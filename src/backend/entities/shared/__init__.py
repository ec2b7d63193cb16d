"""Shared utilities for pipeline components."""

from .errors import ModelInvocationError, ProviderConfigurationError

__all__ = ["ModelInvocationError", "ProviderConfigurationError"]
