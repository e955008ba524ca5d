"""
Parameter validation for saving and executing query templates.

Save time: placeholders extracted from the text must match the declared
``values`` one to one. Execute time: provided values and identifiers must
match the stored spec by count, by name and (for values) by type.

Both checks are pure and raise the first failure found.
"""

from __future__ import annotations

from collections.abc import Sequence

from querystore.core.errors import (
    ArityError,
    InvalidPlaceholder,
    MissingIdentifier,
    MissingParameter,
    ParameterConflict,
    TypeMismatch,
)
from querystore.core.param_type import matches_type
from querystore.engines.sql.parser import ExtractedParameters, find_placeholder_casts
from querystore.models import (
    ParameterSpec,
    ProvidedIdentifier,
    ProvidedValue,
    ValueParameterSpec,
)


def check_placeholder_syntax(text: str) -> None:
    """Reject ``:name::type``, which would otherwise run as literal text."""
    casts = find_placeholder_casts(text)
    if casts:
        name = casts[0]
        raise InvalidPlaceholder(
            f"Placeholder ':{name}' is followed by a '::' cast; "
            f"write CAST(:{name} AS type) instead",
            name=name,
        )


def build_parameter_spec(
    extracted: ExtractedParameters,
    declared_values: Sequence[ValueParameterSpec] | None,
) -> ParameterSpec:
    """
    Validate declared values against placeholders found in the text and
    return the ParameterSpec to store.

    Order of checks: name conflict between the two placeholder forms, then
    every extracted value name must be declared (MissingParameter), then
    the declared list must have the same size (ArityError).
    """
    declared = list(declared_values or [])

    conflict = set(extracted.values) & set(extracted.identifiers)
    if conflict:
        name = sorted(conflict)[0]
        raise ParameterConflict(
            f"Parameter '{name}' is used both as value (:{name}) "
            f"and identifier (:{name}:)",
            name=name,
        )

    declared_names = {v.name for v in declared}
    for name in extracted.values:
        if name not in declared_names:
            raise MissingParameter(
                f"Parameter '{name}' is used in the query but not declared in values",
                name=name,
            )

    if len(declared) != len(extracted.values):
        raise ArityError(
            f"Query has {len(extracted.values)} value parameter(s) "
            f"but {len(declared)} were declared",
            expected=len(extracted.values),
            provided=len(declared),
        )

    # declared is now the same set as extracted; keep text order
    by_name = {v.name: v for v in declared}
    return ParameterSpec(
        values=[
            ValueParameterSpec(name=n, type=by_name[n].type) for n in extracted.values
        ],
        identifiers=list(extracted.identifiers),
    )


def validate_provided_parameters(
    spec: ParameterSpec,
    values: Sequence[ProvidedValue],
    identifiers: Sequence[ProvidedIdentifier],
) -> None:
    """Check execute-time parameters against the stored *spec*."""
    if len(values) != len(spec.values):
        raise ArityError(
            f"Expected {len(spec.values)} value parameter(s), got {len(values)}",
            expected=len(spec.values),
            provided=len(values),
        )
    if len(identifiers) != len(spec.identifiers):
        raise ArityError(
            f"Expected {len(spec.identifiers)} identifier(s), got {len(identifiers)}",
            expected=len(spec.identifiers),
            provided=len(identifiers),
        )

    provided = {v.name: v for v in values}
    for declared in spec.values:
        item = provided.get(declared.name)
        if item is None:
            raise MissingParameter(
                f"Missing value for parameter '{declared.name}'", name=declared.name
            )
        if not matches_type(item.value, declared.type):
            raise TypeMismatch(
                f"Invalid type for parameter '{declared.name}': "
                f"expected {declared.type.value}",
                name=declared.name,
            )

    provided_identifiers = {i.name for i in identifiers}
    for name in spec.identifiers:
        if name not in provided_identifiers:
            raise MissingIdentifier(f"Missing identifier '{name}'", name=name)
