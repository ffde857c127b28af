# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape

from gitask import state as app_state
from gitask.error import GitaskError
from gitask.initialize import initialize
from gitask.model.filter import Filter
from gitask.model.task import Task
from gitask.query.parse import format_filter
from gitask.service.command import Workspace
from gitask.terminal.custom_typer import AliasedTyperGroup
from gitask.view.project import projects_view
from gitask.view.tag import tags_view
from gitask.view.task import (
    DEFAULT_COLUMNS,
    RESOLVED_COLUMNS,
    single_task_view,
    tasks_view,
)

# Commands take raw tokens like +tag, -tag and P1, so options must not be
# parsed out of them
TOKENS = {"allow_extra_args": True, "ignore_unknown_options": True}

app = typer.Typer(
    cls=AliasedTyperGroup,
    help="gitask - tasks as text files in a git repository",
    invoke_without_command=True,
)

console = Console()
error_console = Console(stderr=True)


@app.callback()
def main_callback(
    ctx: typer.Context,
    ignore_context: Annotated[
        bool,
        typer.Option(
            "--ignore-context",
            "-i",
            help="Ignore the stored context for this command",
        ),
    ] = False,
) -> None:
    """
    gitask - tasks as text files in a git repository

    Without a command the next tasks are shown.
    """
    app_state.set_ignore_context(ignore_context)
    if ctx.invoked_subcommand is None:
        workspace = _workspace()
        _show(workspace, "next", workspace.next([]))


def _workspace() -> Workspace:
    return initialize(ignore_context=app_state.get_ignore_context())


def _context_description(workspace: Workspace) -> Optional[str]:
    if workspace.ignore_context:
        return None
    context = workspace.context.context
    if context is None:
        return None
    return format_filter(context)


def _show(
    workspace: Workspace,
    report_name: str,
    tasks: list[Task],
    columns: list[str] = DEFAULT_COLUMNS,
) -> None:
    tasks_view(
        _context_description(workspace),
        report_name,
        tasks,
        workspace.id_of,
        columns=columns,
        now=workspace.now,
    )


def _report(tasks: list[Task], workspace: Workspace, verb: str) -> None:
    for task in tasks:
        id = workspace.id_of(task)
        prefix = f"{id}: " if id is not None else ""
        console.print(f"{verb} {prefix}{escape(task['summary'])}")


@app.command("add, a", context_settings=TOKENS)
def add(ctx: typer.Context) -> None:
    """Add a task from a summary and tokens (+tag, project:name, P0-P3, due:date, template:id), with a note after /."""
    workspace = _workspace()
    task = workspace.add(ctx.args)
    _report([task], workspace, "Added")


@app.command("log", context_settings=TOKENS)
def log(ctx: typer.Context) -> None:
    """Record a task that is already resolved."""
    workspace = _workspace()
    task = workspace.log(ctx.args)
    _report([task], workspace, "Logged")


@app.command("template", context_settings=TOKENS)
def template(ctx: typer.Context) -> None:
    """Turn tasks into templates, or create a new template from a summary."""
    workspace = _workspace()
    _report(workspace.template(ctx.args), workspace, "Template")


@app.command("start", context_settings=TOKENS)
def start(ctx: typer.Context) -> None:
    workspace = _workspace()
    _report(workspace.start(ctx.args), workspace, "Started")


@app.command("stop", context_settings=TOKENS)
def stop(ctx: typer.Context) -> None:
    workspace = _workspace()
    _report(workspace.stop(ctx.args), workspace, "Stopped")


@app.command("done", context_settings=TOKENS)
def done(ctx: typer.Context) -> None:
    workspace = _workspace()
    _report(workspace.done(ctx.args), workspace, "Resolved")


@app.command("modify, m", context_settings=TOKENS)
def modify(ctx: typer.Context) -> None:
    """Modify tasks by ID, or every task in the current context."""
    workspace = _workspace()
    _report(workspace.modify(ctx.args), workspace, "Modified")


@app.command("remove, rm", context_settings=TOKENS)
def remove(ctx: typer.Context) -> None:
    workspace = _workspace()
    _report(workspace.remove(ctx.args), workspace, "Removed")


@app.command("context", context_settings=TOKENS)
def context(ctx: typer.Context) -> None:
    """Show, set, or clear (with `none`) the default filter."""
    workspace = _workspace()
    current: Optional[Filter] = workspace.set_context(ctx.args)
    if current is None:
        console.print("no context")
    else:
        console.print(f"context: {escape(format_filter(current))}")


@app.command("sync")
def sync() -> None:
    """Pull from and push to the configured remote."""
    _workspace().sync()
    console.print("synced")


@app.command("undo")
def undo(count: Annotated[int, typer.Argument(min=1)] = 1) -> None:
    """Reset the repository by one or more commits."""
    _workspace().undo(count)
    console.print(f"undid {count} commit(s)")


@app.command("next, n", context_settings=TOKENS)
def next_tasks(ctx: typer.Context) -> None:
    """Open tasks, most urgent first. With IDs, show those tasks in full."""
    workspace = _workspace()
    tasks = workspace.next(ctx.args)
    if tasks and all(token.isdigit() for token in ctx.args if token != "--"):
        for task in tasks:
            single_task_view(task, workspace.id_of(task))
        return
    _show(workspace, "next", tasks)


@app.command("show-open", context_settings=TOKENS)
def show_open(ctx: typer.Context) -> None:
    workspace = _workspace()
    _show(workspace, "open", workspace.show_open(ctx.args))


@app.command("show-active", context_settings=TOKENS)
def show_active(ctx: typer.Context) -> None:
    workspace = _workspace()
    _show(workspace, "active", workspace.show_active(ctx.args))


@app.command("show-paused", context_settings=TOKENS)
def show_paused(ctx: typer.Context) -> None:
    workspace = _workspace()
    _show(workspace, "paused", workspace.show_paused(ctx.args))


@app.command("show-resolved", context_settings=TOKENS)
def show_resolved(ctx: typer.Context) -> None:
    workspace = _workspace()
    _show(
        workspace, "resolved", workspace.show_resolved(ctx.args), RESOLVED_COLUMNS
    )


@app.command("show-templates", context_settings=TOKENS)
def show_templates(ctx: typer.Context) -> None:
    workspace = _workspace()
    _show(workspace, "templates", workspace.show_templates(ctx.args))


@app.command("show-unorganised", context_settings=TOKENS)
def show_unorganised(ctx: typer.Context) -> None:
    """Open tasks without tags or a project. Context is not applied."""
    workspace = _workspace()
    tasks = workspace.show_unorganised(ctx.args)
    tasks_view(None, "unorganised", tasks, workspace.id_of)


@app.command("show-projects", context_settings=TOKENS)
def show_projects(ctx: typer.Context) -> None:
    workspace = _workspace()
    projects_view(_context_description(workspace), workspace.show_projects(ctx.args))


@app.command("show-tags", context_settings=TOKENS)
def show_tags(ctx: typer.Context) -> None:
    workspace = _workspace()
    tags_view(_context_description(workspace), workspace.show_tags(ctx.args))


@app.command("git", context_settings=TOKENS)
def git(ctx: typer.Context) -> None:
    """Run git inside the task repository."""
    returncode, output = _workspace().git(ctx.args)
    if output:
        console.print(output.rstrip("\n"), markup=False, highlight=False)
    if returncode != 0:
        raise typer.Exit(returncode)


def run() -> None:
    try:
        app()
    except GitaskError as e:
        error_console.print(f"[bold red]error:[/bold red] {escape(str(e))}")
        raise SystemExit(1) from e
