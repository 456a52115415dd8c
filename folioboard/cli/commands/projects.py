"""
FILE: folioboard/cli/commands/projects.py
PURPOSE: Project management commands (project add, ls, show, edit, mv, rm)
"""

import json
from typing import List, Optional

import typer
from rich.markup import escape
from rich.panel import Panel

from ..main import console, error_console, find_project, open_board, project_app, run
from ...core.constants import ProjectStatus
from ...core.exceptions import FolioboardError
from ...formatting import BoardFormatter, ProjectFormatter, styled_status


def _split_labels(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


@project_app.command("add")
def project_add(
    title: str = typer.Argument(..., help="Project title"),
    description: Optional[str] = typer.Option(None, "--desc", "-d", help="Project description"),
    status: str = typer.Option(
        ProjectStatus.IDEA.value, "--status", "-s", help=f"One of: {', '.join(ProjectStatus.values())}"
    ),
    tech: Optional[str] = typer.Option(None, "--tech", help="Comma-separated technologies"),
    tags: Optional[str] = typer.Option(None, "--tags", help="Comma-separated tags"),
    url: Optional[str] = typer.Option(None, "--url", help="Project link"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Create a new project.

    Example:
        folioboard project add "Portfolio site" --tech python,htmx
        folioboard project add "CLI tool" --status planning --json
    """

    async def _add():
        current = await open_board()
        return await current.create_project(
            title,
            description,
            status=status,
            technologies=_split_labels(tech),
            tags=_split_labels(tags),
            url=url,
        )

    try:
        project = run(_add())

        if json_output:
            typer.echo(project.to_json())
        elif raw:
            typer.echo(f"{project.id}: {project.title}")
        else:
            console.print(
                f"[green]✓[/green] Created project [bold]{project.id[:8]}[/bold]: {escape(project.title)}"
            )

    except FolioboardError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@project_app.command("ls")
def project_ls(
    status: Optional[str] = typer.Option(None, "--status", "-s", help="Only projects in this status"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    List projects, grouped by status in board order.

    Example:
        folioboard project ls
        folioboard project ls --status in-progress --json
    """

    async def _ls():
        current = await open_board()
        if status:
            return await current.projects.get_projects_by_status(status)

        projects = []
        for value in ProjectStatus.values():
            projects.extend(await current.projects.get_projects_by_status(value))
        return projects

    try:
        projects = run(_ls())

        if json_output:
            typer.echo(ProjectFormatter.to_json_array(projects))
        elif raw:
            for line in ProjectFormatter.to_raw_lines(projects):
                typer.echo(line)
        elif not projects:
            console.print("[dim]No projects found.[/dim]")
        else:
            console.print(ProjectFormatter.create_table(projects))

    except FolioboardError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@project_app.command("show")
def project_show(
    project_ref: str = typer.Argument(..., help="Project title or id"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Show one project with its task board.

    Example:
        folioboard project show "Portfolio site"
    """

    async def _show():
        current = await open_board()
        project = find_project(await current.get_projects(), project_ref)
        project_board = await current.for_project(project.id)
        return project, await project_board.get_tasks()

    try:
        project, columns = run(_show())

        if json_output:
            data = project.to_dict()
            data["board"] = json.loads(BoardFormatter.to_json(columns))
            typer.echo(json.dumps(data, indent=2))
        elif raw:
            typer.echo(f"{project.id}: [{project.status.value}] {project.title}")
            for line in BoardFormatter.to_raw_lines(columns):
                typer.echo(line)
        else:
            details = [
                f"[bold]{escape(project.title)}[/bold]  {styled_status(project.status.value)}",
                f"[dim]{project.id}[/dim]",
            ]
            if project.description:
                details.append(escape(project.description))
            if project.technologies:
                details.append(f"Tech: [magenta]{escape(', '.join(project.technologies))}[/magenta]")
            if project.tags:
                details.append(f"Tags: {escape(', '.join(project.tags))}")
            if project.url:
                details.append(f"URL: {escape(project.url)}")
            console.print(Panel("\n".join(details), title="Project", expand=False))
            console.print(BoardFormatter.create_table(columns, title="Tasks"))

    except FolioboardError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@project_app.command("edit")
def project_edit(
    project_ref: str = typer.Argument(..., help="Project title or id"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    description: Optional[str] = typer.Option(None, "--desc", "-d", help="New description"),
    status: Optional[str] = typer.Option(None, "--status", "-s", help="New status"),
    tech: Optional[str] = typer.Option(None, "--tech", help="Comma-separated technologies (replaces)"),
    tags: Optional[str] = typer.Option(None, "--tags", help="Comma-separated tags (replaces)"),
    url: Optional[str] = typer.Option(None, "--url", help="Project link"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Update project fields.

    Example:
        folioboard project edit "Portfolio site" --title "Portfolio v2"
        folioboard project edit 9c1d --status on-hold --tech python,rich
    """
    changes = {}
    for key, value in (
        ("title", title),
        ("description", description),
        ("status", status),
        ("technologies", _split_labels(tech)),
        ("tags", _split_labels(tags)),
        ("url", url),
    ):
        if value is not None:
            changes[key] = value

    if not changes:
        error_console.print("[red]Error:[/red] Nothing to update")
        raise typer.Exit(1)

    async def _edit():
        current = await open_board()
        project = find_project(await current.get_projects(), project_ref)
        return await current.update_project(project.id, changes)

    try:
        project = run(_edit())

        if json_output:
            typer.echo(project.to_json())
        elif raw:
            typer.echo(f"{project.id}: [{project.status.value}] {project.title}")
        else:
            console.print(f"[green]✓ Updated project [bold]{project.id[:8]}[/bold][/green]")

    except FolioboardError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@project_app.command("mv")
def project_mv(
    project_ref: str = typer.Argument(..., help="Project title or id"),
    to_column: str = typer.Argument(..., help="ideas, in-progress, completed (or a status)"),
    to_index: Optional[int] = typer.Option(
        None, "--index", "-i", help="Position in destination (default: end)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Move a project to another column of the project board.

    Example:
        folioboard project mv "Portfolio site" in-progress
        folioboard project mv 9c1d completed --index 0
    """

    async def _mv():
        current = await open_board()
        project = find_project(await current.get_projects(), project_ref)
        return await current.move_project(project.id, to_column, to_index)

    try:
        project = run(_mv())

        if json_output:
            typer.echo(project.to_json())
        elif raw:
            typer.echo(f"{project.id}: {project.status.value} {project.order}")
        else:
            console.print(
                f"[green]✓ Moved project [bold]{project.id[:8]}[/bold] to "
                f"{project.status.value} (position {project.order})[/green]"
            )

    except FolioboardError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@project_app.command("rm")
def project_rm(
    project_ref: str = typer.Argument(..., help="Project title or id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    raw: bool = typer.Option(False, "--raw", help="Plain text output (no colors)"),
):
    """
    Delete a project and all of its tasks.

    Example:
        folioboard project rm "Old idea" --yes
    """

    async def _find():
        current = await open_board()
        return find_project(await current.get_projects(), project_ref)

    async def _rm(project_id):
        current = await open_board()
        await current.delete_project(project_id)

    try:
        project = run(_find())

        if not yes and not json_output and not raw:
            task_count = len(project.tasks)
            typer.confirm(
                f"Delete project '{project.title}' and its {task_count} task(s)?",
                abort=True,
            )

        run(_rm(project.id))

        if json_output:
            typer.echo(json.dumps({"deleted": project.id}, indent=2))
        elif raw:
            typer.echo(project.id)
        else:
            console.print(f"[green]✓ Deleted project [bold]{project.id[:8]}[/bold][/green]")

    except FolioboardError as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
