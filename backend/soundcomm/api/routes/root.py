# backend/soundcomm/api/routes/root.py

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root():
    """Liveness check: confirms the relay process is up."""
    return "SoundComm relay running"
