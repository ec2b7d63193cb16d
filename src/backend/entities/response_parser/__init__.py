"""Response Parser package for decoding model replies into query intents."""

from .parser import normalize_confidence, parse_model_response

__all__ = ["normalize_confidence", "parse_model_response"]
