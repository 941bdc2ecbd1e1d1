"""
Recurring templates: claim, spawn and advance.

A template is a Transaction with is_recurring=True. Every due occurrence is
turned into a concrete transaction (with its equal-split debts) exactly once:
the claim is a compare-and-swap on next_payment_date, and the spawn commits in
the same unit as the advance (or the deletion of an exhausted template). A
racer whose compare-and-swap matches no row rolls back and spawns nothing.
"""

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Tuple

from sqlalchemy import delete, update
from sqlmodel import Session, select

from app.core.clock import Clock
from app.core.retry import with_store_retry
from app.models.transaction import Transaction
from app.schemas.ledger import SweepResult
from app.utils.date_helpers import is_due, next_occurrence
from app.utils.split_helpers import add_concrete_transaction

logger = logging.getLogger(__name__)


@dataclass
class Claim:
    instance: Transaction
    # None when the template was retired by this claim
    next_payment_date: Optional[date]


@with_store_retry
def find_due_templates(session: Session, today: date) -> List[Tuple[int, date]]:
    """(template id, observed next_payment_date) for every template due on or before today."""
    rows = session.exec(
        select(Transaction.id, Transaction.next_payment_date)
        .where(
            Transaction.is_recurring == True,  # noqa: E712
            Transaction.next_payment_date != None,  # noqa: E711
            Transaction.next_payment_date <= today,
        )
        .order_by(Transaction.next_payment_date, Transaction.id)
    ).all()
    return [(template_id, next_date) for template_id, next_date in rows]


@with_store_retry
def claim_occurrence(session: Session, template_id: int, observed_next: date, today: date) -> Optional[Claim]:
    """Spawn the occurrence dated `observed_next` and advance or retire the template.

    Returns None when the template is gone, not due, or another caller
    already claimed this occurrence.
    """
    template = session.get(Transaction, template_id)
    if template is None or not template.is_recurring:
        return None
    if template.next_payment_date != observed_next or not is_due(observed_next, today):
        return None

    creditor = template.creditor
    participants = list(template.participants)
    amount = template.amount
    description = template.description
    household_id = template.household_id

    next_date = next_occurrence(template.recurrence_interval, observed_next, anchor=template.start_date)

    claimed = (
        Transaction.id == template_id,
        Transaction.is_recurring == True,  # noqa: E712
        Transaction.next_payment_date == observed_next,
    )
    if next_date is None:
        stmt = delete(Transaction).where(*claimed)
    else:
        stmt = update(Transaction).where(*claimed).values(next_payment_date=next_date)

    result = session.execute(stmt.execution_options(synchronize_session=False))
    if result.rowcount != 1:
        session.rollback()
        logger.info("Lost claim on template %s for %s; already processed", template_id, observed_next)
        return None

    instance = add_concrete_transaction(
        session,
        creditor=creditor,
        participants=participants,
        amount=amount,
        description=description,
        household_id=household_id,
    )
    session.commit()
    session.refresh(instance)
    # the template row changed behind the identity map
    session.expire_all()

    if next_date is None:
        logger.info("Template %s spawned transaction %s and was retired", template_id, instance.id)
    else:
        logger.info("Template %s spawned transaction %s; next payment %s", template_id, instance.id, next_date)
    return Claim(instance=instance, next_payment_date=next_date)


def run_sweep(session: Session, today: date) -> SweepResult:
    """Process every due template, catching up on missed occurrences one claim at a time."""
    result = SweepResult()

    for template_id, observed in find_due_templates(session, today):
        while observed is not None and observed <= today:
            claim = claim_occurrence(session, template_id, observed, today)
            if claim is None:
                result.lost_claims += 1
                break
            result.spawned += 1
            result.spawned_transaction_ids.append(claim.instance.id)
            if claim.next_payment_date is None:
                result.retired += 1
            observed = claim.next_payment_date

    if result.spawned or result.lost_claims:
        logger.info(
            "Recurrence sweep for %s: spawned=%d retired=%d lost=%d",
            today, result.spawned, result.retired, result.lost_claims,
        )
    return result


class RecurrenceJob:
    """Periodic trigger for run_sweep, started from the app lifespan."""

    def __init__(self, session_factory: Callable[[], Session], clock: Clock, interval_seconds: float):
        self._session_factory = session_factory
        self._clock = clock
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> SweepResult:
        with self._session_factory() as session:
            return run_sweep(session, self._clock.today())

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="recurrence-sweep")
        logger.info("Recurrence job started (every %ss)", self._interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Recurrence job stopped")

    async def _run(self) -> None:
        while True:
            try:
                await asyncio.to_thread(self.run_once)
            except Exception:
                logger.exception("Recurrence sweep failed")
            await asyncio.sleep(self._interval)
