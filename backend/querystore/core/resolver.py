"""
Target database resolution for a template execution.

A template lists the databases it may run against; the caller may name
one. Exactly one database is resolved or an error names the allowed set.
No default is picked when several are allowed and none was requested.
"""

from collections.abc import Sequence

from querystore.core.errors import AmbiguousDatabase, UnavailableDatabase


def resolve_database(
    target_databases: Sequence[str],
    requested: str | None = None,
) -> str:
    """
    Resolve the database to execute on.

    - single target: that target; a different *requested* name fails;
    - *requested* given: must be one of *target_databases*;
    - nothing requested with several targets: ``AmbiguousDatabase``.
    """
    allowed = [d.strip() for d in target_databases if d and d.strip()]
    wanted = requested.strip() if requested else None
    if not allowed:
        raise UnavailableDatabase(
            "Query has no target database configured", allowed=[]
        )

    if wanted:
        if wanted not in allowed:
            raise UnavailableDatabase(
                f"The specified database {wanted} is not one of the available "
                f"databases for this query: {', '.join(allowed)}",
                allowed=allowed,
            )
        return wanted

    if len(allowed) > 1:
        raise AmbiguousDatabase(
            "No database selected among the available databases: "
            + ", ".join(allowed),
            allowed=allowed,
        )
    return allowed[0]
