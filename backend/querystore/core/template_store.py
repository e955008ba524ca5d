"""
Template store: persistence of QueryTemplate rows with version history.

Versioned update runs as one transaction: the row is re-read with
``SELECT ... FOR UPDATE`` (a no-op on SQLite), the pre-update snapshot is
appended to ``version_history``, the given fields are applied and
``updated_at`` is bumped. History entries are never edited or removed.
"""

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from sqlmodel import Session, col, func, select

from querystore.core.errors import TemplateNotFound, UnavailableDatabase
from querystore.core.pool import DatabaseRegistry
from querystore.models import ParameterSpec, QueryTemplate

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"text", "target_databases", "label", "description", "parameter_spec"}
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TemplateStore:
    """CRUD-without-delete for query templates on the store database."""

    def __init__(self, session: Session, registry: DatabaseRegistry) -> None:
        self.session = session
        self.registry = registry

    def check_databases(self, target_databases: Sequence[str]) -> list[str]:
        """Trim, de-duplicate (keeping order) and check against the registry."""
        names = list(dict.fromkeys(d.strip() for d in target_databases if d and d.strip()))
        if not names:
            raise UnavailableDatabase(
                "At least one target database is required", allowed=self.registry.names()
            )
        unknown = self.registry.unknown(names)
        if unknown:
            raise UnavailableDatabase(
                f"Specified database is not available: {', '.join(unknown)}",
                allowed=self.registry.names(),
            )
        return names

    def create(
        self,
        text: str,
        target_databases: Sequence[str],
        label: str | None = None,
        parameter_spec: ParameterSpec | None = None,
        description: str | None = None,
    ) -> QueryTemplate:
        """Persist a new template with empty history and return it."""
        databases = self.check_databases(target_databases)
        spec = parameter_spec or ParameterSpec()
        template = QueryTemplate(
            text=text,
            target_databases=databases,
            label=label,
            description=description,
            parameter_spec=spec.model_dump(mode="json"),
            version_history=[],
        )
        self.session.add(template)
        self.session.commit()
        self.session.refresh(template)
        logger.info("Saved query %s for databases %s", template.id, databases)
        return template

    def get(self, template_id: uuid.UUID) -> QueryTemplate:
        template = self.session.get(QueryTemplate, template_id)
        if template is None:
            raise TemplateNotFound(template_id)
        return template

    def versioned_update(
        self, template_id: uuid.UUID, fields: dict[str, Any]
    ) -> QueryTemplate:
        """
        Push the current state onto ``version_history`` and apply *fields*.

        Only keys present in *fields* are changed; ``parameter_spec`` may be
        a ``ParameterSpec`` or its dict form.
        """
        unexpected = set(fields) - UPDATABLE_FIELDS
        if unexpected:
            raise ValueError(f"Cannot update field(s): {', '.join(sorted(unexpected))}")

        changes = dict(fields)
        if "target_databases" in changes:
            changes["target_databases"] = self.check_databases(changes["target_databases"])
        if isinstance(changes.get("parameter_spec"), ParameterSpec):
            changes["parameter_spec"] = changes["parameter_spec"].model_dump(mode="json")

        stmt = (
            select(QueryTemplate)
            .where(QueryTemplate.id == template_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        template = self.session.exec(stmt).first()
        if template is None:
            self.session.rollback()
            raise TemplateNotFound(template_id)

        # New list object so the JSON column is flagged dirty.
        template.version_history = [*(template.version_history or []), template.snapshot()]
        for key, value in changes.items():
            setattr(template, key, value)
        template.updated_at = _utc_now()

        self.session.add(template)
        self.session.commit()
        self.session.refresh(template)
        logger.info(
            "Updated query %s (version %d)", template.id, len(template.version_history)
        )
        return template

    def list(
        self, page: int = 1, page_size: int = 20, label: str | None = None
    ) -> tuple[list[QueryTemplate], int]:
        """Paginated templates, newest first; optional case-insensitive label filter."""
        count_stmt = select(func.count()).select_from(QueryTemplate)
        stmt = select(QueryTemplate)
        if label:
            count_stmt = count_stmt.where(col(QueryTemplate.label).ilike(f"%{label}%"))
            stmt = stmt.where(col(QueryTemplate.label).ilike(f"%{label}%"))
        total = self.session.exec(count_stmt).one()
        stmt = (
            stmt.order_by(col(QueryTemplate.created_at).desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(self.session.exec(stmt).all()), total
