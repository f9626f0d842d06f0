"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.text import Text

from chartfile.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from chartfile.services.result import ServiceResult

Renderer = Callable[..., None]


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        code = result.error.code if result.error else "UNKNOWN_ERROR"
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} [{code}] {msg}"

    path = result.data.get("output") or result.data.get("path")
    return str(path) if path else f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="chart.ok")
    op = Text(f"  {result.op}", style="chart.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="chart.key")
    if key.endswith("_id"):
        v = Text(str(value), style="chart.id")
    elif key in ("path", "output", "backup_path"):
        v = Text(str(value), style="chart.path")
    elif key == "chart_name":
        v = Text(str(value), style="chart.name")
    elif key.endswith("_version"):
        v = Text(str(value), style="chart.version")
    elif isinstance(value, (dict, list)):
        v = Text(_json.dumps(value, separators=(",", ":")))
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(Text(f"    {k}: {v}"))


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="chart.error")
    op = Text(f"  {result.op}", style="chart.op")
    code = Text(f"  [{err.code}]" if err else "", style="chart.error")
    console.print(label, op, code, Text(" "), Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Summary of a document that passed every load layer."""
    _status_line(console, result)
    data = result.data
    for key in ("path", "chart_name", "chart_id", "file_version"):
        _field(console, key, data.get(key))
    console.print(f"  {data.get('tasks', 0)} tasks, {data.get('dependencies', 0)} dependencies")
    if data.get("needs_upgrade"):
        console.print(
            Text(
                f"  older format; run 'chartfile upgrade' to move to v{data['current_version']}",
                style="chart.warning",
            )
        )
    if verbose:
        _render_meta(console, result)


def _render_upgrade(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    data = result.data
    _field(console, "path", data.get("path"))
    if data.get("upgraded"):
        console.print(f"  upgraded v{data['from_version']} -> v{data['to_version']}")
        if data.get("backup_path"):
            _field(console, "backup_path", data["backup_path"])
    elif data.get("needs_upgrade"):
        console.print(
            Text(f"  upgrade pending: v{data['from_version']} -> v{data['to_version']}")
        )
    else:
        console.print(f"  already at v{data['from_version']}")


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Renderer] = {
    "check": _render_check,
    "upgrade": _render_upgrade,
}
