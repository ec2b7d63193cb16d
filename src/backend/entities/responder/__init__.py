"""Responder package: conversational replies, follow-ups and canned quick responses."""

from .follow_ups import fallback_follow_ups, parse_follow_ups
from .quick_responses import try_quick_response
from .responder import Responder, fallback_summary

__all__ = [
    "Responder",
    "fallback_follow_ups",
    "fallback_summary",
    "parse_follow_ups",
    "try_quick_response",
]
