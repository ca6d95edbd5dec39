import json

from tests.utils import parse_text, read_example, run_text
from ast_json import ast_to_json, result_to_json
from pretty_printer import PrettyPrinter


def test_ast_to_json_is_serializable():
    ast = parse_text(read_example("05_comprehensive.c"))
    data = ast_to_json(ast)
    # must round-trip through the json module
    json.loads(json.dumps(data))
    assert data["node_type"] == "Program"
    func = data["statements"][0]
    assert func["node_type"] == "FunctionDecl"
    assert func["func_name"] == "process_number"
    assert func["arg_names"] == ["num"]
    assert func["return_type"] == "int"


def test_ast_to_json_assignment_shape():
    ast = parse_text("void main() { int x; x += 2; }")
    assign = ast_to_json(ast)["statements"][0]["body"]["statements"][1]
    assert assign == {
        "node_type": "Assignment",
        "target": "x",
        "value": {
            "node_type": "BinaryOp",
            "operator": "+",
            "left": {"node_type": "Identifier", "name": "x"},
            "right": {"node_type": "IntLiteral", "value": 2},
        },
    }


def test_result_to_json():
    result = run_text(read_example("04_functions.c"))
    data = result_to_json(result)
    assert data["entry_point"] == "main"
    assert data["slots"]["main.final_result"] == 4
    assert data["slots"]["my_decrement.x"] == 3
    assert data["return_value"] is None
    assert data["output"] == []
    json.dumps(data)


def test_pretty_printer_outputs_non_empty_strings():
    ast = parse_text(read_example("04_functions.c"))
    s = PrettyPrinter.print_ast(ast)
    assert s.startswith("Program")
    assert "FunctionDecl(my_decrement -> int, params=[x: int])" in s
    assert "FunctionCall(my_decrement)" in s


def test_print_surface():
    ast = parse_text("int f(int a) { a = a - 1; return a; } void main() { }")
    func = ast.statements[0]
    assert PrettyPrinter.print_surface(func) == "int f(int a)"
    assert PrettyPrinter.print_surface(func.body.statements[0]) == "a = a - 1"
    assert PrettyPrinter.print_surface(func.body.statements[1]) == "return a"


def test_print_slots_groups_by_function():
    text = PrettyPrinter.print_slots({"main.x": 10, "main.yy": 5, "f.x": 3})
    assert text.splitlines() == ["main:", "  x  = 10", "  yy = 5", "f:", "  x = 3"]


def test_pointer_nodes_to_json_and_surface():
    ast = parse_text("void main() { int x; int* p = &x; *p = 2; }")
    body = ast.statements[0].body.statements
    decl = ast_to_json(body[1])
    assert decl["var_type"] == "int*"
    assert decl["init_value"] == {"node_type": "AddressOf", "name": "x"}
    assert ast_to_json(body[2])["target"] == {
        "node_type": "Dereference",
        "pointer": {"node_type": "Identifier", "name": "p"},
    }
    assert PrettyPrinter.print_surface(body[1]) == "int* p = &x"
    assert PrettyPrinter.print_surface(body[2]) == "*p = 2"


def test_result_to_json_encodes_pointer_slots():
    result = run_text("void main() { int x; int* p = &x; int* q; }")
    data = result_to_json(result)
    assert data["slots"]["main.p"] == "&main.x"
    assert data["slots"]["main.q"] is None
    json.dumps(data)


def test_print_slots_shows_pointers():
    result = run_text("void main() { int x; int* p = &x; int* q; }")
    lines = PrettyPrinter.print_slots(result.slots).splitlines()
    assert "  p = &main.x" in lines
    assert "  q = NULL" in lines
