"""
Health-check helpers for liveness and readiness probes.

Liveness  - is the process alive and not deadlocked? (cheap, no I/O)
Readiness - can it serve traffic? (store database + every tenant database)
"""

import logging

from sqlmodel import Session, select

from querystore.core.pool import DatabaseRegistry, health_check

logger = logging.getLogger(__name__)


def check_store(registry: DatabaseRegistry) -> bool:
    """Check the template store by running SELECT 1. Returns True if ok."""
    try:
        with Session(registry.store_engine) as session:
            session.exec(select(1)).first()
        return True
    except Exception:
        logger.warning("Store database check failed", exc_info=True)
        return False


def check_tenants(registry: DatabaseRegistry) -> list[str]:
    """Names of tenant databases that do not answer SELECT 1."""
    failed: list[str] = []
    for name in registry.names():
        if not health_check(registry.get_engine(name)):
            failed.append(name)
    return failed


def liveness_check() -> tuple[bool, list[str]]:
    """
    Lightweight liveness probe; no I/O. Return format matches readiness_check.
    """
    return (True, [])


def readiness_check(registry: DatabaseRegistry) -> tuple[bool, list[str]]:
    """
    Run store + tenant checks.
    Returns (ok, list of failure messages); tenant failures read ``tenant:<name>``.
    """
    failures: list[str] = []

    if not check_store(registry):
        failures.append("store")

    failures.extend(f"tenant:{name}" for name in check_tenants(registry))

    return (len(failures) == 0, failures)
