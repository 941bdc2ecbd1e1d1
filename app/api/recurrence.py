from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.clock import Clock, get_clock
from app.database import get_session
from app.schemas.ledger import SweepResult
from app.services.recurrence_scheduler import run_sweep

router = APIRouter(prefix="/recurrence", tags=["recurrence"])


@router.post("/sweep", response_model=SweepResult)
def sweep_recurring(session: Session = Depends(get_session), clock: Clock = Depends(get_clock)):
    """Run one sweep now, outside the periodic job."""
    return run_sweep(session, clock.today())
