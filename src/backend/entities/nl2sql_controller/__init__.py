"""
NL2SQL Controller - Orchestrates a single chat turn.

The controller:
1. Answers canned conversational messages directly
2. Generates SQL from the schema snapshot via the configured model
3. Gates, executes, and narrates the result
4. Records both sides of the exchange in session history
"""

from .pipeline import ChatTurn, process_message

__all__ = ["ChatTurn", "process_message"]
