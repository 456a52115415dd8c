"""
FILE: folioboard/cli/commands/tasks.py
PURPOSE: Task board commands (add, board, mv, reorder, edit, rm)
"""

import json
from typing import List, Optional

import typer
from rich.markup import escape

from ..main import app, console, error_console, find_task, open_board, run
from ...core.exceptions import FolioboardError, ValidationError
from ...formatting import BoardFormatter


def _split_ids(value: str) -> List[str]:
    """Split a comma-separated id list, dropping blanks."""
    return [part.strip() for part in value.split(",") if part.strip()]


@app.command()
def add(
    title: str = typer.Argument(..., help="Task title"),
    column_id: Optional[str] = typer.Option(
        None, "--column", "-c", help="Column to add to (default: first column)"
    ),
    description: Optional[str] = typer.Option(None, "--desc", "-d", help="Task description"),
    project_ref: Optional[str] = typer.Option(None, "--project", "-p", help="Project title or id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Create a task at the end of a column.

    Example:
        folioboard add "Write README"
        folioboard add "Ship v1" --column in-progress --project "Portfolio site"
    """

    async def _add():
        current = await open_board(project_ref)
        return await current.add_task(column_id or current.tasks.columns[0], title, description)

    try:
        task = run(_add())

        if json_output:
            typer.echo(task.to_json())
        elif raw:
            typer.echo(f"{task.id}: {task.title}")
        else:
            console.print(
                f"[green]✓ Created task [bold]{task.id[:8]}[/bold] in {escape(task.column_id)}:[/green] {escape(task.title)}"
            )

    except FolioboardError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def board(
    project_ref: Optional[str] = typer.Option(None, "--project", "-p", help="Project title or id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Show the board, one column per status.

    Example:
        folioboard board
        folioboard board --project "Portfolio site" --json
    """

    async def _board():
        current = await open_board(project_ref)
        return await current.get_tasks()

    try:
        columns = run(_board())

        if json_output:
            typer.echo(BoardFormatter.to_json(columns))
        elif raw:
            for line in BoardFormatter.to_raw_lines(columns):
                typer.echo(line)
        else:
            title = f"Board: {project_ref}" if project_ref else "Board"
            console.print(BoardFormatter.create_table(columns, title=title))

    except FolioboardError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def mv(
    task_ref: str = typer.Argument(..., help="Task id (or unique prefix)"),
    to_column: str = typer.Argument(..., help="Destination column"),
    to_index: Optional[int] = typer.Option(
        None, "--index", "-i", help="Position in destination column (default: end)"
    ),
    project_ref: Optional[str] = typer.Option(None, "--project", "-p", help="Project title or id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Move a task to another column, or to another position in its column.

    Example:
        folioboard mv 3f2a in-progress
        folioboard mv 3f2a ideas --index 0
    """

    async def _mv():
        current = await open_board(project_ref)
        columns = await current.get_tasks()
        from_col, from_index, _ = find_task(columns, task_ref)
        destination = to_index
        if destination is None:
            # Clamped to the last slot by the move
            destination = len(columns.get(to_column, []))
        return await current.move_task(from_col, to_column, from_index, destination)

    try:
        task = run(_mv())

        if json_output:
            typer.echo(task.to_json())
        elif raw:
            typer.echo(f"{task.id}: {task.column_id} {task.order}")
        else:
            console.print(
                f"[green]✓ Moved task [bold]{task.id[:8]}[/bold] to {task.column_id} "
                f"(position {task.order}, {task.status.value})[/green]"
            )

    except FolioboardError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def reorder(
    column_id: str = typer.Argument(..., help="Column to reorder"),
    task_ids: str = typer.Argument(..., help="Comma-separated task ids in the new order"),
    project_ref: Optional[str] = typer.Option(None, "--project", "-p", help="Project title or id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Rewrite the order of a column.

    Ids may be unique prefixes. Tasks left out keep their relative
    order after the listed ones.

    Example:
        folioboard reorder ideas 9c1d,3f2a,77e0
    """

    async def _reorder():
        current = await open_board(project_ref)
        columns = await current.get_tasks()
        ordered = []
        for ref in _split_ids(task_ids):
            found_col, _, task = find_task(columns, ref)
            if found_col != column_id:
                raise ValidationError(f"Task {task.id[:8]} is in '{found_col}', not '{column_id}'")
            ordered.append(task.id)
        await current.reorder_column(column_id, ordered)
        return (await current.get_tasks())[column_id]

    try:
        tasks = run(_reorder())

        if json_output:
            typer.echo(json.dumps([t.to_dict() for t in tasks], indent=2))
        elif raw:
            for task in tasks:
                typer.echo(f"{task.order}\t{task.id}\t{task.title}")
        else:
            console.print(f"[green]✓ Reordered {column_id} ({len(tasks)} tasks)[/green]")

    except FolioboardError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def edit(
    task_ref: str = typer.Argument(..., help="Task id (or unique prefix)"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    description: Optional[str] = typer.Option(None, "--desc", "-d", help="New description"),
    project_ref: Optional[str] = typer.Option(None, "--project", "-p", help="Project title or id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Update a task's title and/or description.

    Example:
        folioboard edit 3f2a --title "Write better README"
        folioboard edit 3f2a --desc ""
    """
    updates = {}
    if title is not None:
        updates["title"] = title
    if description is not None:
        updates["description"] = description
    if not updates:
        error_console.print("[red]Error:[/red] Nothing to update (use --title and/or --desc)")
        raise typer.Exit(1)

    async def _edit():
        current = await open_board(project_ref)
        column_id, _, task = find_task(await current.get_tasks(), task_ref)
        return await current.update_task(task.id, column_id, updates)

    try:
        task = run(_edit())

        if json_output:
            typer.echo(task.to_json())
        elif raw:
            typer.echo(f"{task.id}: {task.title}")
        else:
            console.print(f"[green]✓ Updated task [bold]{task.id[:8]}[/bold][/green]")

    except FolioboardError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def rm(
    task_refs: str = typer.Argument(..., help="Task id(s), comma-separated"),
    project_ref: Optional[str] = typer.Option(None, "--project", "-p", help="Project title or id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Delete one or more tasks.

    Example:
        folioboard rm 3f2a
        folioboard rm 3f2a,9c1d
    """

    async def _rm():
        current = await open_board(project_ref)
        deleted = []
        for ref in _split_ids(task_refs):
            column_id, _, task = find_task(await current.get_tasks(), ref)
            await current.delete_task(task.id, column_id)
            deleted.append(task.id)
        return deleted

    try:
        deleted = run(_rm())

        if json_output:
            typer.echo(json.dumps({"deleted": deleted}, indent=2))
        elif raw:
            for task_id in deleted:
                typer.echo(task_id)
        else:
            console.print(f"[green]✓ Deleted {len(deleted)} task(s)[/green]")

    except FolioboardError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
