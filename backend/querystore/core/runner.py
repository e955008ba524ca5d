"""
Query service: save / execute / get / update / list for query templates.

Flow for execute::

    get template -> validate provided params against stored spec
      -> resolve target database -> check identifier values
      -> materialize (text, params) -> execute on the resolved database

Every validation step runs before any tenant database is touched.
"""

import logging
import uuid
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from sqlmodel import Session

from querystore.core.config import settings
from querystore.core.errors import UnavailableDatabase
from querystore.core.param_validate import (
    build_parameter_spec,
    check_placeholder_syntax,
    validate_provided_parameters,
)
from querystore.core.pool import DatabaseRegistry
from querystore.core.resolver import resolve_database
from querystore.core.template_store import TemplateStore
from querystore.engines.sql import execute_statement, extract_parameters, materialize
from querystore.engines.sql.safety import check_identifier_value, check_template_safety
from querystore.models import (
    ProvidedParameters,
    QueryTemplate,
    ValueParameterSpec,
)

logger = logging.getLogger(__name__)


@dataclass
class SaveResult:
    template: QueryTemplate
    warnings: list[dict[str, Any]]


@dataclass
class ExecutionResult:
    database: str
    statement: str
    binds: dict[str, Any]
    rows: Iterator[dict[str, Any]]


class QueryService:
    def __init__(self, session: Session, registry: DatabaseRegistry) -> None:
        self.registry = registry
        self.store = TemplateStore(session, registry)

    def save(
        self,
        text: str,
        target_databases: Sequence[str],
        label: str | None = None,
        description: str | None = None,
        values: Sequence[ValueParameterSpec] | None = None,
    ) -> SaveResult:
        """Validate placeholders against *values* and store a new template."""
        check_placeholder_syntax(text)
        spec = build_parameter_spec(extract_parameters(text), values)
        template = self.store.create(
            text,
            target_databases,
            label=label,
            parameter_spec=spec,
            description=description,
        )
        return SaveResult(template=template, warnings=check_template_safety(text))

    def execute(
        self,
        template_id: uuid.UUID,
        database: str | None = None,
        parameters: ProvidedParameters | None = None,
    ) -> ExecutionResult:
        template = self.store.get(template_id)
        params = parameters or ProvidedParameters()
        validate_provided_parameters(template.spec, params.values, params.identifiers)

        target = resolve_database(template.target_databases, database)
        if target not in self.registry:
            raise UnavailableDatabase(
                f"Database {target} is not available", allowed=self.registry.names()
            )

        for ident in params.identifiers:
            check_identifier_value(
                ident.name, ident.value, strict=settings.IDENTIFIER_STRICT_MODE
            )

        query = materialize(template.text, params.values, params.identifiers)
        logger.debug("Query %s materialized for %s: %s", template_id, target, query.statement)
        rows = execute_statement(self.registry, target, query.statement, query.binds)
        return ExecutionResult(
            database=target, statement=query.statement, binds=query.binds, rows=rows
        )

    def get(self, template_id: uuid.UUID) -> QueryTemplate:
        return self.store.get(template_id)

    def update(self, template_id: uuid.UUID, fields: dict[str, Any]) -> QueryTemplate:
        """
        Versioned update. Keys present in *fields* change, including ``None``
        for ``label`` and ``description`` (clears them); absent keys keep
        their value. Accepted keys: ``text``, ``target_databases``, ``label``,
        ``description``, ``values``.

        When the text or the declared values change, the merged pair is
        re-validated exactly like a save.
        """
        current = self.store.get(template_id)
        changes = {k: v for k, v in fields.items() if k != "values"}
        if "text" in fields or "values" in fields:
            new_text = fields.get("text", current.text)
            new_values = fields.get("values", current.spec.values)
            check_placeholder_syntax(new_text)
            changes["parameter_spec"] = build_parameter_spec(
                extract_parameters(new_text), new_values
            )
        return self.store.versioned_update(template_id, changes)

    def list(
        self, page: int = 1, page_size: int = 20, label: str | None = None
    ) -> tuple[list[QueryTemplate], int]:
        return self.store.list(page=page, page_size=page_size, label=label)
