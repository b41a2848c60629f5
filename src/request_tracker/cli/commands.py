# src/request_tracker/cli/commands.py

from __future__ import annotations

import contextlib
import inspect
import logging
import shlex
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import cast

from ..core.state import AppState
from ..export.csv_export import export_csv
from ..records.errors import IndexOutOfRange, ValidationError
from ..records.models import TaskDraft
from ..views.calendar import project
from ..views.engine import ActiveView, SortKey, ViewRow, ViewStats, group_by_status

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

DRAFT_FIELDS = ("title", "date", "client", "owner", "status")


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Arguments are split shell-style, so quoted values keep their spaces.
        Unbalanced quotes (e.g. an apostrophe in "Kim's quote") fall back
        to a plain whitespace split.
        """
        if not line.startswith("/"):
            return None

        parts = _split_args(line[1:])
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


def _split_args(text: str) -> list[str]:
    try:
        return shlex.split(text)
    except ValueError:
        logger.debug("Unbalanced quotes in command, splitting on whitespace: %r", text)
        return text.split()


registry = CommandRegistry()


# ---- formatting ----


def _cell(text: str, width: int) -> str:
    if len(text) > width:
        return text[: max(0, width - 1)] + "…"
    return text.ljust(width)


def format_rows(rows: Sequence[ViewRow]) -> str:
    """
    Table of visible rows.

    '#' is the 1-based store position used by /rm and /done.
    '!' marks rows due today or tomorrow that are not completed.
    """
    if not rows:
        return "(no matching requests)"
    header = f"{'#':>4}  {'':1} {'Date':<10}  {'Client':<14}  {'Owner':<12}  {'Request':<30}  {'Status':<11}  Done"
    lines = [header, "-" * len(header)]
    for row in rows:
        rec = row.record
        lines.append(
            f"{row.position + 1:>4}  {'!' if row.urgent else ' '} {rec.date:<10}  "
            f"{_cell(rec.client, 14)}  {_cell(rec.owner, 12)}  {_cell(rec.title, 30)}  "
            f"{_cell(rec.status.label, 11)}  {'[x]' if rec.completed else '[ ]'}"
        )
    return "\n".join(lines)


def format_stats(stats: ViewStats) -> str:
    return (
        f"Total requests: {stats.total_count}\n"
        f"Completed: {stats.completed_count}\n"
        f"Completion rate: {stats.completion_rate}%"
    )


def format_calendar(state: AppState) -> str:
    entries = project(state.store.records)
    if not entries:
        return "Calendar is empty."
    lines = ["Calendar:"]
    for entry in sorted(entries, key=lambda e: e.date):
        lines.append(f"  {entry.date}  {entry.label}")
    return "\n".join(lines)


def render_active_view(state: AppState) -> str:
    if state.view.active_view is ActiveView.CALENDAR:
        return format_calendar(state)

    result = state.current_view()
    if state.view.active_view is ActiveView.STATUS:
        blocks: list[str] = []
        for status, rows in group_by_status(result.rows).items():
            if rows:
                blocks.append(f"== {status.label} ({len(rows)}) ==\n{format_rows(rows)}")
        body = "\n\n".join(blocks) if blocks else format_rows([])
    else:
        body = format_rows(result.rows)
    return f"{body}\n\n{format_stats(result.stats)}"


# ---- argument helpers ----


def parse_draft(args: list[str]) -> TaskDraft:
    """
    Build a draft from "key=value" args.

    Without any key=value pair, the first arg is the date and the rest is the title:
      /add 2025-04-08 call the supplier

    Words that are not key=value pairs are appended to the title:
      /add title=Call date=2025-04-08 the supplier  -> title "Call the supplier"
    """
    if args and not any("=" in a for a in args):
        return TaskDraft(date=args[0], title=" ".join(args[1:]))

    values: dict[str, str] = {}
    loose: list[str] = []
    for arg in args:
        key, sep, value = arg.partition("=")
        key = key.strip().lower()
        if sep and key in DRAFT_FIELDS:
            values[key] = value
        else:
            loose.append(arg)
    if loose:
        values["title"] = " ".join([values["title"], *loose]) if values.get("title") else " ".join(loose)
    return TaskDraft(**values)


def _parse_position(args: list[str], usage: str) -> int | str:
    """Return a 0-based store index, or a usage message."""
    if len(args) != 1:
        return usage
    raw = args[0].lstrip("#").rstrip(".")
    if not raw.isdigit() or int(raw) < 1:
        return "Invalid position. Use the number from the # column."
    return int(raw) - 1


# ---- handlers ----


def cmd_help(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add title="..." date=YYYY-MM-DD [client=...] [owner=...] [status=...]
    /add YYYY-MM-DD title words...
    """
    if not args:
        return 'Usage: /add title="..." date=YYYY-MM-DD [client=...] [owner=...] [status=...]'
    try:
        record = state.store.add(parse_draft(args))
    except ValidationError as e:
        logger.debug("Add rejected kind=%s field=%s", e.kind.value, e.field)
        return f"Not added: {e.message}"
    return f"Added #{len(state.store)} {record.date} {record.title}"


def cmd_rm(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    pos = _parse_position(args, "Usage: /rm <#>")
    if isinstance(pos, str):
        return pos
    try:
        record = state.store.delete(pos)
    except IndexOutOfRange:
        return f"No request #{pos + 1}."
    return f'Removed "{record.title}".'


def cmd_done(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    pos = _parse_position(args, "Usage: /done <#>")
    if isinstance(pos, str):
        return pos
    try:
        record = state.store.toggle_completed(pos)
    except IndexOutOfRange:
        return f"No request #{pos + 1}."
    mark = "completed" if record.completed else "not completed"
    return f'"{record.title}" marked {mark}.'


def cmd_search(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    state.view.set_search_term(" ".join(args))
    if not state.view.search_term:
        return "Search cleared."
    return f'Searching for "{state.view.search_term}".'


def cmd_filter(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 1:
        return f"Filter is {state.view.filter_status.value}. Usage: /filter all|completed|incomplete"
    try:
        state.view.set_filter_status(args[0])
    except ValueError as e:
        return str(e)
    return f"Filter set to {state.view.filter_status.value}."


def cmd_sort(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 1:
        keys = "|".join(k.value for k in SortKey)
        return f"Sorting by {state.view.sort_key}. Usage: /sort {keys}"
    state.view.set_sort_key(args[0])
    if state.view.sort_key not in {k.value for k in SortKey}:
        return f"Unknown sort key {state.view.sort_key!r}; keeping entry order."
    return f"Sorting by {state.view.sort_key}."


def cmd_view(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    if len(args) != 1:
        return f"Current view: {state.view.active_view.value}. Usage: /view calendar|all|status"
    try:
        state.view.set_active_view(args[0])
    except ValueError as e:
        return str(e)
    return render_active_view(state)


def cmd_show(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return render_active_view(state)


def cmd_stats(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    return format_stats(state.current_view().stats)


def cmd_export(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /export          -> <export_dir>/request_list.csv
    /export <path>   -> explicit file or directory
    """
    if args:
        destination = Path(args[0]).expanduser()
    else:
        destination = Path(getattr(state.settings, "export_dir", "."))
        destination.mkdir(parents=True, exist_ok=True)

    if emit:
        with contextlib.suppress(Exception):
            emit("[EXPORT] Writing CSV...")

    visible = state.current_view().records
    try:
        path = export_csv(visible, destination)
    except OSError as e:
        logger.exception("CSV export failed destination=%s", destination)
        return f"Export failed: {e}"
    return f"Exported {len(visible)} requests to {path}"


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add",
    cmd_add,
    help_text='Add a request: /add title="..." date=YYYY-MM-DD client=... owner=... status=...',
)
registry.register("rm", cmd_rm, help_text="Delete a request by its # number.", aliases=["remove", "del"])
registry.register("done", cmd_done, help_text="Toggle completed for a request by its # number.", aliases=["toggle"])
registry.register("search", cmd_search, help_text="Search title/client/owner (no args clears).")
registry.register("filter", cmd_filter, help_text="Filter: /filter all | completed | incomplete.")
registry.register("sort", cmd_sort, help_text="Sort: /sort date | client | status.")
registry.register("view", cmd_view, help_text="Switch tab: /view calendar | all | status.")
registry.register("show", cmd_show, help_text="Render the current tab.", aliases=["ls"])
registry.register("stats", cmd_stats, help_text="Totals and completion rate of the visible requests.")
registry.register("export", cmd_export, help_text="Export visible requests to CSV: /export [path].")
