"""Workflow package: dependency container for the chat pipeline."""

from .clients import CatalogAdapter, PipelineClients, SqlExecutorAdapter, create_pipeline_clients

__all__ = ["CatalogAdapter", "PipelineClients", "SqlExecutorAdapter", "create_pipeline_clients"]
