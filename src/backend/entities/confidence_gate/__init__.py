"""Confidence Gate package for routing parsed intents."""

from .gate import APOLOGY_MESSAGE, CLARIFICATION_MESSAGE, decide

__all__ = ["APOLOGY_MESSAGE", "CLARIFICATION_MESSAGE", "decide"]
