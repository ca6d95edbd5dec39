"""Graphviz visualization of a program's call graph and shadow slots.

Provides `render_call_graph_dot(program, slots=None)` which returns a
`graphviz.Digraph` object (not rendered), and `write_and_render` which writes
the file to disk.

Layout: each function is an HTML-like table node whose header is the
function signature and whose rows are the function's shadow slots
(`my_decrement.x`, ...). Parameters are shown in italics. When a final slot
mapping is supplied (e.g. `result.slots`) each row also shows the value the
slot held when the program finished. Edges go from caller to callee and are
labelled with the first call site (`my_decrement(x)`); a function calling
itself gets a red self-loop since such a call is rejected at run time.
"""

from typing import Dict, Optional
import html
import re
from graphviz import Digraph
from pretty_printer import PrettyPrinter
from program import Program, declared_slots, first_calls
from symbols import mangle


def _node_id(name: str) -> str:
    return "fn_" + re.sub(r"[^0-9A-Za-z_]", "_", name)


def _function_label(program: Program, name: str, slots: Optional[Dict[str, int]]) -> str:
    function = program.functions[name]
    header = html.escape(function.signature())
    bgcolor = ' BGCOLOR="#e8f0ff"' if name == program.entry_point else ""
    rows = [f'<TR><TD COLSPAN="2"{bgcolor}><B>{header}</B></TD></TR>']

    for slot_name in declared_slots(function):
        key = html.escape(mangle(name, slot_name))
        if slot_name in function.params:
            key = f"<I>{key}</I>"
        if slots is not None:
            value = slots.get(mangle(name, slot_name))
            shown = "&mdash;" if value is None else html.escape(str(value))
            rows.append(f'<TR><TD ALIGN="LEFT">{key}</TD><TD>{shown}</TD></TR>')
        else:
            rows.append(f'<TR><TD ALIGN="LEFT" COLSPAN="2">{key}</TD></TR>')

    return f'<<TABLE BORDER="0" CELLBORDER="1" CELLSPACING="0">{"".join(rows)}</TABLE>>'


def render_call_graph_dot(
    program: Program, slots: Optional[Dict[str, int]] = None
) -> Digraph:
    """Return a graphviz.Digraph for the program's functions and call edges.

    The caller may call `dot.source` to inspect the dot text, or call
    `dot.render(filename, format=...)` to write files (requires Graphviz installed).
    """
    dot = Digraph(format="svg")
    dot.attr("graph", rankdir="LR")

    for name in program.functions:
        dot.node(_node_id(name), label=_function_label(program, name, slots), shape="plaintext")

    for name, function in program.functions.items():
        for callee, call in first_calls(function).items():
            label = PrettyPrinter.print_surface(call)
            if callee == name:
                dot.edge(
                    _node_id(name), _node_id(callee), color="red", label=f"re-entrant: {label}"
                )
            elif callee in program.functions:
                dot.edge(_node_id(name), _node_id(callee), label=label)
            else:
                # builtins and undefined functions get a plain ellipse
                dot.node(_node_id(callee), label=callee, shape="ellipse", style="dashed")
                dot.edge(_node_id(name), _node_id(callee), label=label, style="dashed")

    return dot


def write_and_render(
    program: Program,
    out_path: str,
    slots: Optional[Dict[str, int]] = None,
    fmt: str = "svg",
) -> None:
    """Write and render the call graph to the given path (without extension).

    Example: write_and_render(program, 'out/calls', fmt='png') will create
    out/calls.png (requires Graphviz)."""
    dot = render_call_graph_dot(program, slots=slots)
    dot.format = fmt
    # render appends the extension automatically
    dot.render(out_path, cleanup=True)
