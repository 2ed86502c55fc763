from fastapi import APIRouter

from dropjournal.api.routes import analysis, chat, entries, questions, transcribe


router = APIRouter()

router.include_router(questions.router)
router.include_router(entries.router)
router.include_router(chat.router)
router.include_router(transcribe.router)
router.include_router(analysis.router)
