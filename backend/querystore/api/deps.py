from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Request
from sqlmodel import Session

from querystore.core.pool import DatabaseRegistry
from querystore.core.runner import QueryService


def get_registry(request: Request) -> DatabaseRegistry:
    # Built once in the app lifespan.
    return request.app.state.registry


RegistryDep = Annotated[DatabaseRegistry, Depends(get_registry)]


def get_db(registry: RegistryDep) -> Generator[Session, None, None]:
    with Session(registry.store_engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]


def get_query_service(session: SessionDep, registry: RegistryDep) -> QueryService:
    return QueryService(session, registry)


QueryServiceDep = Annotated[QueryService, Depends(get_query_service)]
