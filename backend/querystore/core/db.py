from sqlalchemy import Engine
from sqlmodel import SQLModel

# make sure all SQLModel models are imported before create_all
from querystore.models import QueryTemplate  # noqa: F401


def init_db(engine: Engine) -> None:
    # Store schema is a single table; created in place instead of migrated.
    SQLModel.metadata.create_all(engine)
