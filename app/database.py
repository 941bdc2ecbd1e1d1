from sqlmodel import SQLModel, Session, create_engine

from app.core.config import DATABASE_URL, DB_ISOLATION_LEVEL, SQL_ECHO

connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    DATABASE_URL,
    echo=SQL_ECHO,
    isolation_level=DB_ISOLATION_LEVEL,
    connect_args=connect_args,
)


def create_db_and_tables():
    from app.models.debt import Debt  # noqa: F401  (register the tables)
    from app.models.transaction import Transaction  # noqa: F401
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
