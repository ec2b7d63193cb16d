"""Model Invoker package: provider selection and guarded model calls."""

from .invoker import ModelInvoker
from .providers import AgentProvider, resolve_provider, select_provider_name

__all__ = ["AgentProvider", "ModelInvoker", "resolve_provider", "select_provider_name"]
