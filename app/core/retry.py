import functools
import logging

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import Session
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.core.config import STORE_RETRY_ATTEMPTS
from app.core.errors import StoreError

logger = logging.getLogger(__name__)


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "Transient store failure in %s (attempt %d): %s",
        retry_state.fn.__name__ if retry_state.fn else "unit of work",
        retry_state.attempt_number,
        retry_state.outcome.exception() if retry_state.outcome else None,
    )


def with_store_retry(func=None, *, attempts: int = STORE_RETRY_ATTEMPTS, min_wait: float = 0.1, max_wait: float = 2.0):
    """Run a unit of work `func(session, ...)` with retry on transient store errors.

    The session is rolled back before every new attempt. Only
    OperationalError is retried; ledger errors propagate untouched and any
    other SQLAlchemy error is reported as StoreError.
    """
    if func is None:
        return functools.partial(with_store_retry, attempts=attempts, min_wait=min_wait, max_wait=max_wait)

    @functools.wraps(func)
    def wrapper(session: Session, *args, **kwargs):
        retrying = Retrying(
            retry=retry_if_exception_type(OperationalError),
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
            before_sleep=_log_retry,
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    try:
                        return func(session, *args, **kwargs)
                    except SQLAlchemyError:
                        session.rollback()
                        raise
        except SQLAlchemyError as exc:
            logger.error("Store failure in %s: %s", func.__name__, exc)
            raise StoreError("Internal Server Error") from exc

    return wrapper
