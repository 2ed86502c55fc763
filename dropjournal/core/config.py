import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

_SUPABASE_URL = os.getenv('SUPABASE_URL')
_SUPABASE_KEY = os.getenv('SUPABASE_KEY')
_STORAGE_BACKEND = os.getenv('STORAGE_BACKEND', 'supabase').lower()

_ANTHROPIC_API_KEY = os.getenv('ANTHROPIC_API_KEY') or os.getenv('CLAUDE_API_KEY')

_CLAUDE_MODEL_PRIMARY = os.getenv('CLAUDE_MODEL_PRIMARY') or os.getenv('CLAUDE_MODEL', 'claude-sonnet-4-5-20250929')
_CLAUDE_MODEL_FALLBACKS = [
    model.strip()
    for model in os.getenv('CLAUDE_MODEL_FALLBACKS', 'claude-3-5-haiku-20241022').split(',')
    if model.strip()
]
_CLAUDE_MODEL_OPTIONS = [_CLAUDE_MODEL_PRIMARY] + [m for m in _CLAUDE_MODEL_FALLBACKS if m and m != _CLAUDE_MODEL_PRIMARY]

_OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
_WHISPER_MODEL = os.getenv('WHISPER_MODEL', 'whisper-1')

_GOOGLE_SHEETS_ID = os.getenv('GOOGLE_SHEETS_ID')
_GOOGLE_SHEETS_RANGE = os.getenv('GOOGLE_SHEETS_RANGE', 'A2:B')
_GOOGLE_SHEETS_CLIENT_EMAIL = os.getenv('GOOGLE_SHEETS_CLIENT_EMAIL')
# Keys pasted into env files usually carry literal "\n" sequences
_GOOGLE_SHEETS_PRIVATE_KEY = (os.getenv('GOOGLE_SHEETS_PRIVATE_KEY') or '').replace('\\n', '\n') or None
_GOOGLE_SHEETS_API_KEY = os.getenv('GOOGLE_SHEETS_API_KEY')

_QUESTION_CURSOR_BACKEND = os.getenv('QUESTION_CURSOR_BACKEND', 'memory').lower()
# Cursor reset is an operator tool; any identified caller may use it when enabled
_QUESTION_RESET_ENABLED = os.getenv('QUESTION_RESET_ENABLED', 'false').lower() in ('true', '1', 'yes')

_ANALYSIS_TIMEOUT_SECONDS = float(os.getenv('ANALYSIS_TIMEOUT_SECONDS', '120'))
_CHAT_TIMEOUT_SECONDS = float(os.getenv('CHAT_TIMEOUT_SECONDS', '30'))


class Config:
    """Central configuration for the journal service."""

    SERVICE_NAME = "drop-journal-service"

    SUPABASE_URL = _SUPABASE_URL
    SUPABASE_KEY = _SUPABASE_KEY
    STORAGE_BACKEND = _STORAGE_BACKEND

    ANTHROPIC_API_KEY = _ANTHROPIC_API_KEY

    CLAUDE_MODEL_PRIMARY = _CLAUDE_MODEL_PRIMARY
    CLAUDE_MODEL_FALLBACKS = _CLAUDE_MODEL_FALLBACKS
    CLAUDE_MODEL_OPTIONS = _CLAUDE_MODEL_OPTIONS

    OPENAI_API_KEY = _OPENAI_API_KEY
    WHISPER_MODEL = _WHISPER_MODEL

    GOOGLE_SHEETS_ID = _GOOGLE_SHEETS_ID
    GOOGLE_SHEETS_RANGE = _GOOGLE_SHEETS_RANGE
    GOOGLE_SHEETS_CLIENT_EMAIL = _GOOGLE_SHEETS_CLIENT_EMAIL
    GOOGLE_SHEETS_PRIVATE_KEY = _GOOGLE_SHEETS_PRIVATE_KEY
    GOOGLE_SHEETS_API_KEY = _GOOGLE_SHEETS_API_KEY

    QUESTION_CURSOR_BACKEND = _QUESTION_CURSOR_BACKEND
    QUESTION_RESET_ENABLED = _QUESTION_RESET_ENABLED

    ANALYSIS_TIMEOUT_SECONDS = _ANALYSIS_TIMEOUT_SECONDS
    CHAT_TIMEOUT_SECONDS = _CHAT_TIMEOUT_SECONDS


settings = Config()
