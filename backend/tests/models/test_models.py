"""Smoke tests for query template models."""

from sqlalchemy import inspect
from sqlmodel import Session

from querystore.models import (
    ParameterSpec,
    ParamTypeEnum,
    QueryTemplate,
    VersionSnapshot,
)


def test_table_name():
    assert QueryTemplate.__tablename__ == "query_template"


def test_table_created(db: Session):
    columns = {c["name"] for c in inspect(db.get_bind()).get_columns("query_template")}
    assert {
        "id",
        "text",
        "target_databases",
        "parameter_spec",
        "label",
        "description",
        "version_history",
        "created_at",
        "updated_at",
    } <= columns


def test_param_type_enum():
    assert ParamTypeEnum.NUMBER_ARRAY.is_array
    assert ParamTypeEnum.NUMBER_ARRAY.element_type == ParamTypeEnum.NUMBER
    assert not ParamTypeEnum.DATE.is_array
    assert ParamTypeEnum.DATE.element_type == ParamTypeEnum.DATE


def test_snapshot_is_detached_copy():
    t = QueryTemplate(
        text="SELECT :a",
        target_databases=["d1"],
        parameter_spec={"values": [{"name": "a", "type": "number"}], "identifiers": []},
        label="x",
    )
    snap = t.snapshot()
    snap["parameter_spec"]["values"].append({"name": "b", "type": "string"})
    snap["target_databases"].append("d2")
    assert [v.name for v in t.spec.values] == ["a"]
    assert t.target_databases == ["d1"]

    parsed = VersionSnapshot.model_validate(t.snapshot())
    assert parsed.text == "SELECT :a"
    assert parsed.parameter_spec == ParameterSpec.model_validate(t.parameter_spec)
