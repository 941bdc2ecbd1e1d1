import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlmodel import Session
from app.core.config import CORS_ORIGINS, RECURRENCE_JOB_ENABLED, RECURRENCE_SWEEP_INTERVAL_SECONDS
from app.core.clock import system_clock
from app.core.errors import ImmutableRecordError, NotFoundError, StoreError, ValidationError
from app.core.logging import setup_logging
from app.database import create_db_and_tables, engine
from app.api import debts, recurrence, transactions
from app.services.recurrence_scheduler import RecurrenceJob
from fastapi.middleware.cors import CORSMiddleware

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    job = None
    if RECURRENCE_JOB_ENABLED:
        job = RecurrenceJob(lambda: Session(engine), system_clock, RECURRENCE_SWEEP_INTERVAL_SECONDS)
        await job.start()
    yield
    if job is not None:
        await job.stop()

app = FastAPI(title="Household Ledger", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": exc.message, "field": exc.field})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ImmutableRecordError)
async def immutable_record_handler(request: Request, exc: ImmutableRecordError):
    content = {"detail": exc.message}
    if exc.reason:
        content["reason"] = exc.reason
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc.__cause__ or exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


app.include_router(transactions.router)
app.include_router(debts.router)
app.include_router(recurrence.router)

@app.get("/")
def root():
    return {"message": "Backend server is running"}
