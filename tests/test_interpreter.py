"""Tests for the shadow-variable interpreter, including the C fixtures in examples/."""

from tests.utils import parse_text, read_example, run_text
from ast_interpreter import CONTINUE, Interpreter, Outcome, interpret_program
from program import load_program


def test_if_statement_fixture():
    result = run_text(read_example("03_if_statement.c"))
    assert result.variables() == {"x": 10, "y": 5, "z": 10}


def test_functions_fixture_reuses_shadow_slot():
    result = run_text(read_example("04_functions.c"))
    assert result.get("initial_val") == 10
    # The discarded third call does not touch main's variable...
    assert result.get("final_result") == 4
    # ...but it still mutates the callee's shared parameter slot: 4 -> 3
    assert result["my_decrement.x"] == 3


def test_comprehensive_fixture():
    result = run_text(read_example("05_comprehensive.c"))
    assert result.get("loop_counter") == 5
    assert result.get("returned_from_func") == 4
    assert result.get("upper_limit") == 5
    assert result.get("lower_limit") == 1
    assert result.variables("process_number") == {
        "num": 6,
        "threshold": 2,
        "processed_val_in_func": 5,
    }


def test_print_fixture_collects_output():
    result = run_text(read_example("06_print_loop.c"))
    assert result.output == [3, 2, 1]
    assert result.get("counter") == 1
    assert result["step_down.n"] == 0


def test_while_loop_runs_exactly_five_iterations():
    src = """
    int dec(int v) { return v - 1; }
    void main() {
        int loop_counter = 10;
        int upper_limit = 5;
        int iterations = 0;
        while (loop_counter > upper_limit) {
            loop_counter = dec(loop_counter);
            iterations = iterations + 1;
        }
    }
    """
    result = run_text(src)
    assert result.get("iterations") == 5
    assert result.get("loop_counter") == 5


def test_while_with_false_condition_runs_zero_times():
    result = run_text("void main() { int x = 0; while (x > 0) { x = 99; } }")
    assert result.get("x") == 0


def test_untaken_if_has_no_side_effects():
    src = """
    int touch(int v) { int seen = 1; return v; }
    void main() {
        int x = 1;
        if (x > 5) { x = touch(7); }
    }
    """
    result = run_text(src)
    assert result.get("x") == 1
    # The callee never ran, so none of its slots exist
    assert "touch.v" not in result.slots
    assert "touch.seen" not in result.slots


def test_else_branch():
    result = run_text("void main() { int x = 1; if (x > 5) x = 2; else x = 3; }")
    assert result.get("x") == 3


def test_discarded_result_leaves_same_callee_state_as_used_result():
    callee = "int bump(int v) { int total = v * 2; return total + 1; }"
    used = run_text(callee + " void main() { int r = bump(4); }")
    discarded = run_text(callee + " void main() { bump(4); }")
    assert used.variables("bump") == discarded.variables("bump") == {"v": 4, "total": 8}
    assert used.get("r") == 9


def test_parameter_is_passed_by_value():
    src = """
    int clobber(int x) { x = 100; return 0; }
    void main() { int x = 5; int ignored = clobber(x); }
    """
    result = run_text(src)
    assert result.get("x") == 5
    assert result["clobber.x"] == 100


def test_bare_declaration_keeps_value_across_calls():
    src = """
    int counter(int step) {
        int total;
        total = total + step;
        return total;
    }
    void main() {
        int a = counter(2);
        int b = counter(3);
    }
    """
    result = run_text(src)
    # `int total;` does not reset the shared slot on the second call
    assert result.get("a") == 2
    assert result.get("b") == 5


def test_declaration_with_initializer_rewrites_every_call():
    src = """
    int fresh(int step) {
        int total = 0;
        total = total + step;
        return total;
    }
    void main() {
        int a = fresh(2);
        int b = fresh(3);
    }
    """
    result = run_text(src)
    assert result.get("a") == 2
    assert result.get("b") == 3


def test_return_exits_nested_loop_and_if():
    src = """
    int first_above(int limit) {
        int i = 0;
        while (i < 100) {
            if (i > limit) {
                return i;
            }
            i = i + 1;
        }
        return 0 - 1;
    }
    void main() { int r = first_above(3); }
    """
    result = run_text(src)
    assert result.get("r") == 4
    assert result["first_above.i"] == 4


def test_return_in_main_ends_program():
    src = "int main() { int x = 1; return x + 41; x = 5; }"
    result = run_text(src)
    assert result.return_value == 42
    assert result.get("x") == 1


def test_nested_calls_to_different_functions():
    src = """
    int add_one(int a) { return a + 1; }
    int twice(int b) { int first = add_one(b); return add_one(first); }
    void main() { int r = twice(add_one(1)); }
    """
    result = run_text(src)
    assert result.get("r") == 4
    assert result["twice.b"] == 2


def test_multiple_parameters_each_get_a_shadow_slot():
    src = """
    int sub(int a, int b) { return a - b; }
    void main() { int r = sub(10, 3); }
    """
    result = run_text(src)
    assert result.get("r") == 7
    assert result.variables("sub") == {"a": 10, "b": 3}


def test_compound_assignment_and_increment():
    result = run_text("void main() { int x = 5; x += 3; x -= 1; x *= 2; x++; x--; x++; }")
    assert result.get("x") == 15


def test_logical_operators_short_circuit():
    src = """
    int mark(int v) { int called = 1; return v; }
    void main() {
        int x = 0;
        if (x > 0 && mark(1) > 0) { x = 1; }
        if (x == 0 || mark(2) > 0) { x = 2; }
        if (!(x == 2)) { x = 3; }
    }
    """
    result = run_text(src)
    assert result.get("x") == 2
    assert "mark.called" not in result.slots


def test_integer_wraparound_32_bit():
    result = run_text("void main() { int x = 2147483647; x = x + 1; int y = 0 - x; }")
    assert result.get("x") == -2147483648
    assert result.get("y") == -2147483648


def test_integer_wraparound_8_bit():
    result = run_text("void main() { int x = 120; x = x + 10; int y = 16 * 16; }", word_size=8)
    assert result.get("x") == -126
    assert result.get("y") == 0


def test_unary_minus_and_multiplication():
    result = run_text("void main() { int x = -3 * 4; int y = -x; }")
    assert result.get("x") == -12
    assert result.get("y") == 12


def test_execution_is_deterministic():
    src = read_example("05_comprehensive.c")
    assert run_text(src).slots == run_text(src).slots


def test_interpreter_run_resets_state():
    program = load_program(parse_text("int f(int a) { return a; } void main() { int x = f(3); }"))
    interp = Interpreter(program)
    first = interp.run()
    second = interp.run()
    assert first.slots == second.slots
    assert interp.call_chain == []


def test_interpret_program_accepts_loaded_program():
    program = load_program(parse_text("void main() { int x = 1; }"))
    assert interpret_program(program).get("x") == 1


def test_step_count_is_reported():
    result = run_text("void main() { int x = 0; x = 1; }")
    assert result.steps == 2


def test_outcome_signal_values():
    assert CONTINUE.returned is False
    assert Outcome(returned=True, value=3).value == 3


def test_pointers_fixture():
    result = run_text(read_example("07_pointers.c"))
    assert result.get("x") == 4
    assert result.get("y") == 12
    assert result.get("result") == 8
    assert str(result.get("p")) == "&main.x"
    assert result.get("q") == result.get("p")
    # the callee's pointer parameter still refers to main's slot
    assert str(result["store_double.out"]) == "&main.result"


def test_pointer_into_callee_slot_sees_its_latest_call():
    src = """
    void bump(int* counter) { *counter = *counter + 1; }
    int twice(int v) { return v * 2; }
    void main() {
        int n = 0;
        int* c = &n;
        bump(c);
        bump(&n);
        int first = twice(5);
        int second = twice(first);
    }
    """
    result = run_text(src)
    assert result.get("n") == 2
    assert result.get("second") == 20
    assert result["twice.v"] == 10


def test_uninitialized_pointer_slot_is_null():
    result = run_text("void main() { int* p; }")
    assert "main.p" in result.slots
    assert result.get("p") is None


def test_user_print_takes_precedence_over_builtin():
    src = (
        "#include <microio.h>\n"
        "int print(int v) { return v + 100; }\n"
        "void main() { int x = print(1); }"
    )
    result = run_text(src)
    assert result.get("x") == 101
    assert result.output == []
    assert result["print.v"] == 1
