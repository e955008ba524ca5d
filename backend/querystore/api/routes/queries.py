"""
Query template endpoints.

Endpoints: save, execute, get, update (versioned), list.
Errors from the service propagate as QueryStoreError subclasses and are
rendered by the handler in querystore.main.
"""

import uuid

from fastapi import APIRouter

from querystore.api.deps import QueryServiceDep
from querystore.schemas import (
    ExecuteQueryIn,
    ExecuteQueryOut,
    QueryTemplateListIn,
    QueryTemplateListOut,
    QueryTemplatePublic,
    SaveQueryIn,
    SaveQueryOut,
    UpdateQueryIn,
    UpdateQueryOut,
)

router = APIRouter(prefix="/queries", tags=["queries"])


@router.post("/save", response_model=SaveQueryOut, status_code=201)
def save_query(service: QueryServiceDep, body: SaveQueryIn) -> SaveQueryOut:
    """Store a new template. Declared values must match the placeholders in text."""
    result = service.save(
        body.text,
        body.target_databases,
        label=body.label,
        description=body.description,
        values=body.parameters.values,
    )
    return SaveQueryOut(
        id=result.template.id,
        message="Query saved successfully",
        warnings=result.warnings,
    )


@router.post("/execute", response_model=ExecuteQueryOut)
def execute_query(service: QueryServiceDep, body: ExecuteQueryIn) -> ExecuteQueryOut:
    result = service.execute(body.id, database=body.database, parameters=body.parameters)
    return ExecuteQueryOut(data=list(result.rows), database=result.database)


@router.post("/list", response_model=QueryTemplateListOut)
def list_queries(
    service: QueryServiceDep, body: QueryTemplateListIn
) -> QueryTemplateListOut:
    """Paginated list, newest first. History is omitted."""
    rows, total = service.list(page=body.page, page_size=body.page_size, label=body.label)
    return QueryTemplateListOut(
        data=[QueryTemplatePublic.from_template(r) for r in rows], total=total
    )


@router.get("/{id}", response_model=QueryTemplatePublic)
def get_query(
    service: QueryServiceDep, id: uuid.UUID, include_history: bool = False
) -> QueryTemplatePublic:
    template = service.get(id)
    return QueryTemplatePublic.from_template(template, include_history=include_history)


@router.patch("/{id}", response_model=UpdateQueryOut)
def update_query(
    service: QueryServiceDep, id: uuid.UUID, body: UpdateQueryIn
) -> UpdateQueryOut:
    """
    Versioned update: the current state is pushed onto the history first.
    Only fields present in the body change; a null label or description
    clears it.
    """
    fields = {
        name: getattr(body, name)
        for name in body.model_fields_set
        if name != "parameters"
    }
    if "parameters" in body.model_fields_set:
        fields["values"] = body.parameters.values
    template = service.update(id, fields)
    return UpdateQueryOut(id=template.id, message="Query updated successfully")
