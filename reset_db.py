from sqlmodel import SQLModel
from app.database import create_db_and_tables, engine

create_db_and_tables()  # registers the models on the metadata
SQLModel.metadata.drop_all(engine)
SQLModel.metadata.create_all(engine)

print("Database reset: transaction and debt tables recreated.")
