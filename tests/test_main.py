"""End-to-end tests of the command line driver."""

import json
import os

import pytest

from tests.utils import EXAMPLES_DIR
from main import EXIT_OK, EXIT_RUNTIME_ERROR, EXIT_SYNTAX_ERROR, cli, run_source
from errors import TypeMismatch


def _example(name):
    return os.path.join(EXAMPLES_DIR, name)


def test_run_source_type_checks_by_default():
    src = "void main() { int x = 1; if (x > 5) { if (x) { x = 2; } } }"
    with pytest.raises(TypeMismatch):
        run_source(src)
    assert run_source(src, typecheck=False).get("x") == 1


def test_cli_prints_final_state(capsys):
    assert cli(["--file", _example("03_if_statement.c")]) == EXIT_OK
    out = capsys.readouterr().out
    assert "main:" in out
    assert "z = 10" in out


def test_cli_dumps_state_json(tmp_path):
    out_path = tmp_path / "state.json"
    code = cli(["-f", _example("05_comprehensive.c"), "--no-state", "--dump-state", str(out_path)])
    assert code == EXIT_OK
    data = json.loads(out_path.read_text())
    assert data["slots"]["main.loop_counter"] == 5
    assert data["slots"]["main.returned_from_func"] == 4


def test_cli_dumps_ast_json(tmp_path):
    out_path = tmp_path / "ast.json"
    assert cli(["-f", _example("04_functions.c"), "--dump-ast", str(out_path)]) == EXIT_OK
    assert json.loads(out_path.read_text())["node_type"] == "Program"


def test_cli_reports_print_output(capsys):
    assert cli(["-f", _example("06_print_loop.c")]) == EXIT_OK
    out = capsys.readouterr().out
    assert "output: 3" in out
    assert "output: 1" in out


def test_cli_runtime_error_exit_code(tmp_path, capsys):
    src = tmp_path / "rec.c"
    src.write_text("int f(int n) { return f(n); } void main() { int r = f(1); }")
    assert cli(["-f", str(src)]) == EXIT_RUNTIME_ERROR
    assert "ReentrantCall" in capsys.readouterr().err


def test_cli_syntax_error_exit_code(tmp_path, capsys):
    src = tmp_path / "bad.c"
    src.write_text("void main() { int x = ; }")
    assert cli(["-f", str(src)]) == EXIT_SYNTAX_ERROR
    assert "Syntax Error" in capsys.readouterr().err


def test_cli_word_size_and_step_limit(tmp_path, capsys):
    src = tmp_path / "wrap.c"
    src.write_text("void main() { int x = 127; x++; }")
    assert cli(["-f", str(src), "--word-size", "8"]) == EXIT_OK
    assert "x = -128" in capsys.readouterr().out

    loop = tmp_path / "loop.c"
    loop.write_text("void main() { int x = 1; while (x > 0) { x = 1; } }")
    assert cli(["-f", str(loop), "--max-steps", "50"]) == EXIT_RUNTIME_ERROR


def test_cli_rejects_invalid_word_size(tmp_path):
    src = tmp_path / "p.c"
    src.write_text("void main() { }")
    with pytest.raises(SystemExit):
        cli(["-f", str(src), "--word-size", "1"])


def test_cli_missing_file(capsys):
    assert cli(["-f", "/nonexistent/program.c"]) == EXIT_SYNTAX_ERROR


def test_cli_reports_deep_nesting_as_syntax_error(tmp_path, capsys):
    src = tmp_path / "deep.c"
    src.write_text("void main() { int x = " + "(" * 2000 + "1" + ")" * 2000 + "; }")
    assert cli(["-f", str(src)]) == EXIT_SYNTAX_ERROR
    assert "nested too deeply" in capsys.readouterr().err


def test_cli_runs_pointer_example(capsys):
    assert cli(["-f", _example("07_pointers.c")]) == EXIT_OK
    out = capsys.readouterr().out
    assert "p      = &main.x" in out
