# backend/soundcomm/api/routes/instruments.py

from typing import List

from fastapi import APIRouter

from soundcomm.models.models import InstrumentInfo
from soundcomm.services.instruments import INSTRUMENTS

router = APIRouter()


@router.get("/instruments", response_model=List[InstrumentInfo])
async def list_instruments():
    """The fixed instrument registry, in snapshot order."""
    return [InstrumentInfo(key=i.key, label=i.label) for i in INSTRUMENTS]
