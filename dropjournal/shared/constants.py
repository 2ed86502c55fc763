"""Shared constants for the journal service."""

# Minimum number of unanalyzed entries before an analysis may be generated
ANALYSIS_THRESHOLD = 7

# Served when the question sheet cannot be reached, keyed by day of the year
FALLBACK_QUESTIONS = (
    "What made you smile today?",
    "What's one thing you learned recently?",
    "What are you grateful for today?",
    "What's challenging you right now?",
    "What's something you're looking forward to?",
    "What's a small win you had today?",
    "What's something that inspired you recently?",
    "What's a goal you're working towards?",
    "What made today unique?",
    "What's something you'd like to improve?",
)

COMPANION_NAME = "DropBot"
