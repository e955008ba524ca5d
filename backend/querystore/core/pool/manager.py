"""
Database registry: the template-store engine plus one engine per tenant database.

Each tenant engine owns its connection pool (size, max-age recycle and
pre-ping health check on checkout from settings). Engines are created
lazily under a lock on first use and disposed together at shutdown.
Membership in the registry is what makes a tenant database "known".
"""

import logging
import threading
from collections.abc import Mapping
from typing import Any

from sqlalchemy import Engine, create_engine, make_url

from querystore.core.config import settings
from querystore.core.errors import UnavailableDatabase
from querystore.models import ProductTypeEnum

from .connect import connect_args, product_type_for_url

_log = logging.getLogger(__name__)


class DatabaseRegistry:
    """Name -> SQLAlchemy engine for tenant databases, plus ``store_engine``."""

    def __init__(
        self,
        store_url: str,
        tenant_urls: Mapping[str, str],
        *,
        pool_size: int | None = None,
        max_age_sec: int | None = None,
        connect_timeout: int | None = None,
    ) -> None:
        self._store_url = store_url
        self._tenant_urls: dict[str, str] = {
            name.strip(): url for name, url in tenant_urls.items() if name.strip()
        }
        self._pool_size = pool_size or settings.EXTERNAL_DB_POOL_SIZE
        self._max_age = max_age_sec or settings.EXTERNAL_DB_POOL_MAX_AGE_SEC
        self._connect_timeout = connect_timeout or settings.EXTERNAL_DB_CONNECT_TIMEOUT
        self._engines: dict[str, Engine] = {}
        self._store_engine: Engine | None = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def names(self) -> list[str]:
        """Configured tenant database names, in configuration order."""
        return list(self._tenant_urls)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._tenant_urls

    def unknown(self, names: list[str]) -> list[str]:
        """Return the entries of *names* that are not configured tenants."""
        return [n for n in names if n not in self._tenant_urls]

    def product_type(self, name: str) -> ProductTypeEnum | None:
        return product_type_for_url(self._url_for(name))

    # ------------------------------------------------------------------
    # Engines
    # ------------------------------------------------------------------

    @property
    def store_engine(self) -> Engine:
        if self._store_engine is None:
            with self._lock:
                if self._store_engine is None:
                    self._store_engine = create_engine(
                        self._store_url, **_sqlite_kwargs(self._store_url)
                    )
        return self._store_engine

    def get_engine(self, name: str) -> Engine:
        """Engine for tenant *name*; ``UnavailableDatabase`` if not configured."""
        url = self._url_for(name)
        engine = self._engines.get(name)
        if engine is not None:
            return engine
        with self._lock:
            engine = self._engines.get(name)
            if engine is None:
                engine = create_engine(url, **self._engine_kwargs(url))
                self._engines[name] = engine
                _log.info("Opened pool for tenant database %s", name)
        return engine

    def dispose(self, name: str | None = None) -> None:
        """Dispose pooled connections. ``None`` = every tenant and the store."""
        with self._lock:
            if name is not None:
                engines = [e for e in [self._engines.pop(name, None)] if e is not None]
            else:
                engines = list(self._engines.values())
                if self._store_engine is not None:
                    engines.append(self._store_engine)
                self._engines.clear()
                self._store_engine = None
        for engine in engines:
            engine.dispose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _url_for(self, name: str) -> str:
        url = self._tenant_urls.get(name)
        if url is None:
            raise UnavailableDatabase(
                f"Database {name} is not available", allowed=self.names()
            )
        return url

    def _engine_kwargs(self, url: str) -> dict[str, Any]:
        if make_url(url).get_backend_name() == "sqlite":
            return _sqlite_kwargs(url)
        return {
            "pool_size": self._pool_size,
            "pool_recycle": self._max_age,
            "pool_pre_ping": True,
            "connect_args": connect_args(
                product_type_for_url(url), self._connect_timeout
            ),
        }


def _sqlite_kwargs(url: str) -> dict[str, Any]:
    # Connections are shared across request threads.
    if make_url(url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {}


def build_registry() -> DatabaseRegistry:
    """Registry from settings: store URI and every configured tenant."""
    return DatabaseRegistry(
        settings.SQLALCHEMY_DATABASE_URI,
        settings.tenant_database_urls,
    )
