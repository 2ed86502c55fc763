"""Prompt text for the periodic journal analysis."""

from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from dropjournal.features.analysis.generator import AnalysisBatchItem

ANALYSIS_SYSTEM_PROMPT = """You are a warm, perceptive journaling coach. The user has answered one \
reflective question per day and sometimes talked each answer through with a companion. \
You read the whole stretch of entries at once and write back to them."""

ANALYSIS_INSTRUCTIONS = """Write a short narrative analysis (250-450 words) of the journal entries below, \
addressed to the writer as "you".

- Open with the overall mood and energy of this stretch.
- Name 2-3 recurring themes, quoting or paraphrasing specific answers.
- Point out one shift or contrast between earlier and later entries.
- Close with one gentle, concrete suggestion and one question to carry forward.

Plain prose with short paragraphs. No headings, no bullet points, no JSON."""

TRANSCRIPT_LINE_LIMIT = 12
ANSWER_CHAR_LIMIT = 2000


def build_analysis_prompt(items: List["AnalysisBatchItem"]) -> str:
    """Render the batch, oldest entry first, followed by the instructions."""
    sections = []
    for number, item in enumerate(items, start=1):
        lines = [
            f"ENTRY {number} ({item.created_at:%Y-%m-%d})",
            f"Question: {item.question}",
            f"Answer: {item.answer[:ANSWER_CHAR_LIMIT]}",
        ]
        if item.transcript:
            lines.append("Conversation:")
            for turn in item.transcript[:TRANSCRIPT_LINE_LIMIT]:
                speaker = "Companion" if turn["role"] == "assistant" else "Writer"
                lines.append(f"  {speaker}: {turn['content']}")
        sections.append("\n".join(lines))

    entries_block = "\n\n".join(sections)
    return f"{ANALYSIS_INSTRUCTIONS}\n\n=== JOURNAL ENTRIES ({len(items)}) ===\n\n{entries_block}"
