"""Local prompts served while the question sheet is unreachable."""

from datetime import date
from typing import Optional, Sequence

from dropjournal.features.questions.models import Question
from dropjournal.shared.constants import FALLBACK_QUESTIONS


def fallback_question(day: Optional[date] = None, prompts: Sequence[str] = FALLBACK_QUESTIONS) -> Question:
    """Pick the prompt for a calendar day, keyed by day of the year (1 Jan is day 1)."""
    day = day or date.today()
    index = day.timetuple().tm_yday % len(prompts)
    return Question(id=index + 1, text=prompts[index], source="fallback")
