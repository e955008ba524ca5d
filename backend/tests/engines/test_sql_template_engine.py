"""Unit tests for engines.sql.template_engine (materializer)."""

import pytest

from querystore.core.errors import ParameterConflict
from querystore.engines.sql import MaterializedQuery, QueryMaterializer, materialize
from querystore.models import ProvidedIdentifier, ProvidedValue


def _v(name, value):
    return ProvidedValue(name=name, value=value)


def _i(name, value):
    return ProvidedIdentifier(name=name, value=value)


class TestMaterializeScalars:
    def test_scalar_text_unchanged(self):
        sql = "SELECT * FROM t WHERE col = :v AND n > :n"
        out = materialize(sql, [_v("v", "abc"), _v("n", 3)])
        assert out.statement == sql
        assert out.binds == {"v": "abc", "n": 3}

    def test_no_parameters(self):
        assert materialize("SELECT 1") == MaterializedQuery("SELECT 1", {})

    def test_repeated_scalar_bound_once(self):
        out = materialize("SELECT :a, :a", [_v("a", 1)])
        assert out.statement == "SELECT :a, :a"
        assert out.binds == {"a": 1}

    def test_none_value_bound(self):
        out = materialize("WHERE x = :x", [_v("x", None)])
        assert out.binds == {"x": None}


class TestMaterializeArrays:
    def test_array_expands(self):
        out = materialize("WHERE id IN (:ids)", [_v("ids", [1, 2, 3])])
        assert out.statement == "WHERE id IN (:ids_arr_0, :ids_arr_1, :ids_arr_2)"
        assert out.binds == {"ids_arr_0": 1, "ids_arr_1": 2, "ids_arr_2": 3}

    def test_array_reference_count_matches_length(self):
        items = list(range(7))
        out = materialize("WHERE id IN (:ids)", [_v("ids", items)])
        assert len(out.binds) == len(items)
        assert out.statement.count(":ids_arr_") == len(items)

    def test_array_does_not_touch_prefix_name(self):
        out = materialize(
            "WHERE id = :id OR id IN (:ids)", [_v("id", 9), _v("ids", [1, 2])]
        )
        assert out.statement == "WHERE id = :id OR id IN (:ids_arr_0, :ids_arr_1)"
        assert out.binds == {"id": 9, "ids_arr_0": 1, "ids_arr_1": 2}

    def test_empty_array_renders_null(self):
        out = materialize("WHERE id IN (:ids)", [_v("ids", [])])
        assert out.statement == "WHERE id IN (NULL)"
        assert out.binds == {}

    def test_synthesized_name_collision(self):
        with pytest.raises(ParameterConflict):
            materialize(
                "WHERE a IN (:ids) OR b = :ids_arr_0",
                [_v("ids", [1]), _v("ids_arr_0", 5)],
            )


class TestMaterializeIdentifiers:
    def test_identifier_spliced(self):
        out = materialize("SELECT * FROM :tbl:", identifiers=[_i("tbl", "users")])
        assert out.statement == "SELECT * FROM users"
        assert out.binds == {}

    def test_identifier_and_array(self):
        out = QueryMaterializer().materialize(
            "SELECT * FROM :tbl: WHERE id IN (:ids)",
            [_v("ids", [1, 2, 3])],
            [_i("tbl", "users")],
        )
        assert out.statement == (
            "SELECT * FROM users WHERE id IN (:ids_arr_0, :ids_arr_1, :ids_arr_2)"
        )
        assert out.binds == {"ids_arr_0": 1, "ids_arr_1": 2, "ids_arr_2": 3}

    def test_identifier_value_is_not_escaped(self):
        out = materialize("SELECT * FROM :tbl:", identifiers=[_i("tbl", '"My Table"')])
        assert out.statement == 'SELECT * FROM "My Table"'

    def test_identifier_not_confused_with_value_of_same_prefix(self):
        out = materialize(
            "SELECT :col: FROM t WHERE c = :c",
            [_v("c", 1)],
            [_i("col", "name")],
        )
        assert out.statement == "SELECT name FROM t WHERE c = :c"
