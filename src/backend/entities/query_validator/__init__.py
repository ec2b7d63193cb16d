"""Query Validator package for validating SQL queries before execution."""

from .validator import ValidationResult, ensure_limit, validate_query

__all__ = ["ValidationResult", "ensure_limit", "validate_query"]
