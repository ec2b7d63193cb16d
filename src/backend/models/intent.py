"""
Query intent models.

``QueryIntent`` is the structured reading of one model reply. It is
produced by the response parser, consumed by the confidence gate, and
then discarded.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

IntentSource = Literal["json", "regex", "none", "quick", "provider_error"]


class QueryIntent(BaseModel):
    """The model's structured answer to a user message."""

    model_config = ConfigDict(frozen=True)

    sql_query: str = Field(default="", description="Candidate SQL, possibly empty")
    explanation: str = Field(default="", description="Free-text explanation from the model")
    confidence: float = Field(
        default=0.0, ge=0.0, le=1.0, description="Self-reported certainty, canonical [0, 1]"
    )
    suggested_table: str | None = Field(default=None, description="Main table, if the model named one")
    source: IntentSource = Field(
        default="json", description="Decoding stage that produced this intent"
    )

    @property
    def has_sql(self) -> bool:
        """True when the intent carries a non-blank query."""
        return bool(self.sql_query.strip())


class GateDecision(str, Enum):
    """Outcome of the confidence gate."""

    CONVERSATIONAL = "conversational"
    CLARIFY = "clarify"
    EXECUTE = "execute"
