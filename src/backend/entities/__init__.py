"""
Entities package.

Each subdirectory represents a pipeline component:
- prompt_builder/: Renders the schema-aware prompt pair
- model_invoker/: Resolves the LLM provider and guards model calls
- response_parser/: Decodes model replies into query intents
- confidence_gate/: Routes intents to execute, clarify, or converse
- responder/: Conversational replies, narration, follow-up suggestions, quick responses
- history/: Per-session message storage
- query_validator/: Validates SQL queries before execution
- nl2sql_controller/: The pipeline entry point
- workflow/: Dependency container for the pipeline

Shared models are available from the ``models`` package.
"""
