import pytest

from errors import UnboundVariable
from symbols import SymbolTable, mangle, split_mangled


def test_mangle_qualifies_with_function_name():
    assert mangle("my_decrement", "x") == "my_decrement.x"
    assert split_mangled("my_decrement.x") == ("my_decrement", "x")


def test_declare_creates_zero_slot_and_is_idempotent():
    table = SymbolTable()
    slot = table.declare("main.x")
    assert slot.value == 0

    table.write("main.x", 7)
    again = table.declare("main.x")
    assert again is slot
    assert table.read("main.x") == 7
    assert len(table) == 1


def test_read_and_write_require_declaration():
    table = SymbolTable()
    with pytest.raises(UnboundVariable) as exc:
        table.read("main.missing")
    assert exc.value.name == "main.missing"

    with pytest.raises(UnboundVariable):
        table.write("main.missing", 1)
    assert "main.missing" not in table


def test_same_name_in_different_functions_are_distinct_slots():
    table = SymbolTable()
    table.declare("main.x")
    table.declare("my_decrement.x")
    table.write("main.x", 10)
    table.write("my_decrement.x", 3)

    assert table.read("main.x") == 10
    assert table.read("my_decrement.x") == 3


def test_snapshot_and_variables_views():
    table = SymbolTable()
    for name, value in [("main.a", 1), ("f.a", 2), ("main.b", 3)]:
        table.declare(name)
        table.write(name, value)

    assert table.snapshot() == {"main.a": 1, "f.a": 2, "main.b": 3}
    assert list(table) == ["main.a", "f.a", "main.b"]
    assert table.variables("main") == {"a": 1, "b": 3}
    assert table.variables("f") == {"a": 2}

    snap = table.snapshot()
    table.write("main.a", 99)
    assert snap["main.a"] == 1
