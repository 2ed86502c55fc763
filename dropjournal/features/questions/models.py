"""Question type and parsing of raw sheet rows."""

from dataclasses import dataclass
from typing import Any, Optional


class MalformedQuestionRow(ValueError):
    """A sheet row that cannot be turned into a Question."""


@dataclass(frozen=True)
class Question:
    """A journaling prompt. `id` is the ID assigned by the question sheet."""
    id: int
    text: str
    source: str = "sheet"

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text, "source": self.source}


def parse_row_id(cell: Any) -> Optional[int]:
    """Read the ID column; None when the cell is not a positive integer."""
    if isinstance(cell, bool):
        return None
    if isinstance(cell, int):
        return cell if cell >= 1 else None
    if isinstance(cell, str):
        cell = cell.strip()
        if cell.isdigit():
            value = int(cell)
            return value if value >= 1 else None
    return None


def parse_row(row: Any) -> Question:
    """
    Parse one `[id, text]` row from the sheet.

    Raises:
        MalformedQuestionRow: if the row is not a list, the ID is not a
            positive integer, or the question text is missing or blank.
    """
    if not isinstance(row, (list, tuple)) or len(row) < 2:
        raise MalformedQuestionRow(f"Expected [id, text], got {row!r}")

    question_id = parse_row_id(row[0])
    if question_id is None:
        raise MalformedQuestionRow(f"Invalid question ID {row[0]!r}")

    text = row[1]
    if not isinstance(text, str) or not text.strip():
        raise MalformedQuestionRow(f"Question {question_id} has no text")

    return Question(id=question_id, text=text.strip())
