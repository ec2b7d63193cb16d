"""Canned replies for common conversational messages.

Greetings, thanks, and capability questions are answered without a
model call. The returned intent has no SQL and full confidence, so the
confidence gate routes it down the conversational path.
"""

import logging
import re
from dataclasses import dataclass

from models import QueryIntent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuickResponse:
    """A regex and the reply it triggers."""

    name: str
    pattern: re.Pattern[str]
    content: str


QUICK_RESPONSES: list[QuickResponse] = [
    QuickResponse(
        name="greeting",
        pattern=re.compile(
            r"^(hello|hi|hey|hiya|good\s*(morning|afternoon|evening))[\s!?.]*$", re.IGNORECASE
        ),
        content=(
            "**Hello!** I'm your SQL data assistant.\n"
            "\n"
            "I can help you:\n"
            "- Query data from your tables\n"
            "- Filter and search records\n"
            "- Count and aggregate results\n"
            "\n"
            "**How can I help you today?**"
        ),
    ),
    QuickResponse(
        name="capabilities",
        pattern=re.compile(
            r"^(what\s+can\s+you\s+do|what\s+are\s+your\s+(capabilities|features)"
            r"|how\s+do\s+you\s+work|help(\s+me)?)[\s!?.]*$",
            re.IGNORECASE,
        ),
        content=(
            "**What I can do:**\n"
            "\n"
            "- Query data (SELECT)\n"
            "- Filter and search records\n"
            "- Group and aggregate (COUNT, SUM, AVG)\n"
            "- Join tables\n"
            "- Sort and limit results\n"
            "\n"
            "I **cannot** modify or delete data.\n"
            "\n"
            "**Try asking:**\n"
            '- "How many customers do we have?"\n'
            '- "What are the last 5 orders?"'
        ),
    ),
    QuickResponse(
        name="thanks",
        pattern=re.compile(r"^(thanks?|thank\s*you|thx|cheers)[\s!?.]*$", re.IGNORECASE),
        content="**You're welcome!** Glad to help.\n\nIf you need anything else, just ask!",
    ),
    QuickResponse(
        name="goodbye",
        pattern=re.compile(r"^(bye|goodbye|see\s+you|see\s+ya)[\s!?.]*$", re.IGNORECASE),
        content="**See you later!** Come back whenever you have more questions about your data.",
    ),
]


def try_quick_response(message: str) -> QueryIntent | None:
    """Return a canned intent when ``message`` matches a quick response.

    Args:
        message: The user's message.

    Returns:
        A conversational ``QueryIntent`` or ``None`` when nothing matches.
    """
    text = message.strip()
    for quick in QUICK_RESPONSES:
        if quick.pattern.search(text):
            logger.info("Quick response matched: %s", quick.name)
            return QueryIntent(
                sql_query="",
                explanation=quick.content,
                confidence=1.0,
                source="quick",
            )
    return None
