"""
Tests for the SQLite adapter.

Uses the temp_db fixture (DB_PATH monkeypatched to tmp_path).
"""

import asyncio
import sqlite3

import pytest

from conftest import make_task
from folioboard.core import exceptions, sqlite_repository
from folioboard.core.board import Board
from folioboard.core.constants import ProjectStatus, TaskStatus
from folioboard.core.models import Project
from folioboard.core.sqlite_repository import SQLiteBoardRepository


@pytest.fixture
def sqlite_repo(temp_db):
    return SQLiteBoardRepository()


def _project(project_id="p1", title="Portfolio", **fields):
    fields.setdefault("created_at", "2026-01-01T00:00:00")
    fields.setdefault("updated_at", fields["created_at"])
    return Project(id=project_id, title=title, **fields)


# --- Setup ---

def test_db_path_follows_monkeypatch(sqlite_repo, temp_db):
    """Test the default path is resolved from the module at use time."""
    assert sqlite_repo.db_path == temp_db
    assert sqlite_repository.DB_PATH == temp_db


def test_schema_created_on_first_connection(sqlite_repo, temp_db):
    """Test the schema file is applied to a fresh database."""
    conn = sqlite_repo.get_connection()
    tables = {
        row["name"]
        for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
    }
    conn.close()

    assert {"projects", "tasks"} <= tables
    assert temp_db.exists()


# --- Tasks ---

@pytest.mark.asyncio
async def test_save_and_fetch_tasks(sqlite_repo):
    """Test tasks round-trip with order stored in the position column."""
    await sqlite_repo.save_tasks(
        None,
        {
            "ideas": [make_task("a", order=0), make_task("b", order=1)],
            "completed": [make_task("c", "completed", 0, status=TaskStatus.DONE)],
        },
    )

    tasks = {t.id: t for t in await sqlite_repo.fetch_tasks_for_project(None)}

    assert set(tasks) == {"a", "b", "c"}
    assert tasks["b"].order == 1
    assert tasks["c"].status == TaskStatus.DONE
    assert tasks["c"].column_id == "completed"


@pytest.mark.asyncio
async def test_save_tasks_replaces_keyed_columns(sqlite_repo):
    """Test a saved column becomes exactly the given list; other columns are untouched."""
    await sqlite_repo.save_tasks(
        None,
        {"ideas": [make_task("a"), make_task("b", order=1)], "completed": [make_task("c", "completed")]},
    )

    await sqlite_repo.save_tasks(None, {"ideas": [make_task("b", order=0)]})

    stored = {t.id: t for t in await sqlite_repo.fetch_tasks_for_project(None)}
    assert set(stored) == {"b", "c"}
    assert stored["b"].order == 0


@pytest.mark.asyncio
async def test_save_tasks_moves_between_columns(sqlite_repo):
    """Test a task listed under a new key changes column instead of being deleted."""
    await sqlite_repo.save_tasks(None, {"ideas": [make_task("a"), make_task("b", order=1)]})

    await sqlite_repo.save_tasks(
        None,
        {
            "ideas": [make_task("b", order=0)],
            "completed": [make_task("a", "completed", status=TaskStatus.DONE)],
        },
    )

    stored = {t.id: t for t in await sqlite_repo.fetch_tasks_for_project(None)}
    assert stored["a"].column_id == "completed"
    assert stored["a"].status == TaskStatus.DONE
    assert stored["b"].column_id == "ideas"


@pytest.mark.asyncio
async def test_boards_do_not_leak(sqlite_repo):
    """Test saving the standalone board leaves project boards alone."""
    await sqlite_repo.add_project(_project())
    await sqlite_repo.save_tasks("p1", {"ideas": [make_task("owned")]})

    await sqlite_repo.save_tasks(None, {"ideas": []})

    assert [t.id for t in await sqlite_repo.fetch_tasks_for_project("p1")] == ["owned"]
    assert await sqlite_repo.fetch_tasks_for_project(None) == []


# --- Projects ---

@pytest.mark.asyncio
async def test_add_and_fetch_project(sqlite_repo):
    """Test list fields are stored as JSON and come back as lists."""
    await sqlite_repo.add_project(
        _project(technologies=["Python", "SQLite"], tags=["cli"], url="https://x.dev")
    )
    await sqlite_repo.save_tasks("p1", {"ideas": [make_task("t1")]})

    project = await sqlite_repo.fetch_project_by_id("p1")
    projects = await sqlite_repo.fetch_projects()

    assert project.technologies == ["Python", "SQLite"]
    assert project.tags == ["cli"]
    assert project.status == ProjectStatus.IDEA
    assert [t.id for t in project.tasks] == ["t1"]
    assert [p.id for p in projects] == ["p1"]
    assert [t.id for t in projects[0].tasks] == ["t1"]


@pytest.mark.asyncio
async def test_fetch_project_missing(sqlite_repo):
    """Test an unknown id returns None."""
    assert await sqlite_repo.fetch_project_by_id("nope") is None


@pytest.mark.asyncio
async def test_update_project(sqlite_repo):
    """Test partial updates, including status and order."""
    await sqlite_repo.add_project(_project())

    await sqlite_repo.update_project(
        "p1", {"title": "Renamed", "status": ProjectStatus.COMPLETED, "order": 3, "tags": ["a"]}
    )

    project = await sqlite_repo.fetch_project_by_id("p1")
    assert project.title == "Renamed"
    assert project.status == ProjectStatus.COMPLETED
    assert project.order == 3
    assert project.tags == ["a"]


@pytest.mark.asyncio
async def test_update_project_not_found(sqlite_repo):
    """Test updating an unknown id raises ProjectNotFoundError."""
    with pytest.raises(exceptions.ProjectNotFoundError):
        await sqlite_repo.update_project("ghost", {"title": "x"})


@pytest.mark.asyncio
async def test_update_project_unknown_field(sqlite_repo):
    """Test fields without a column are rejected."""
    await sqlite_repo.add_project(_project())

    with pytest.raises(exceptions.ValidationError):
        await sqlite_repo.update_project("p1", {"owner": "me"})


@pytest.mark.asyncio
async def test_delete_project_cascades(sqlite_repo):
    """Test deleting a project deletes its tasks."""
    await sqlite_repo.add_project(_project())
    await sqlite_repo.save_tasks("p1", {"ideas": [make_task("t1")]})

    await sqlite_repo.delete_project("p1")

    assert await sqlite_repo.fetch_projects() == []
    assert await sqlite_repo.fetch_tasks_for_project("p1") == []


@pytest.mark.asyncio
async def test_delete_project_not_found(sqlite_repo):
    """Test deleting an unknown id raises ProjectNotFoundError."""
    with pytest.raises(exceptions.ProjectNotFoundError):
        await sqlite_repo.delete_project("ghost")


@pytest.mark.asyncio
async def test_exists_by_title(sqlite_repo):
    """Test title lookup is trimmed, case-insensitive and can exclude one id."""
    await sqlite_repo.add_project(_project())

    assert await sqlite_repo.exists_by_title("  PORTFOLIO ")
    assert not await sqlite_repo.exists_by_title("Other")
    assert not await sqlite_repo.exists_by_title("portfolio", exclude_id="p1")


# --- Errors ---

@pytest.mark.asyncio
async def test_sqlite_errors_become_repository_errors(sqlite_repo):
    """Test storage failures are wrapped with the operation name."""
    await sqlite_repo.add_project(_project())

    with pytest.raises(exceptions.RepositoryError) as exc_info:
        await sqlite_repo.add_project(_project())

    assert exc_info.value.operation == "add project"
    assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)


# --- Concurrency ---

@pytest.mark.asyncio
async def test_save_waiting_on_lock_keeps_event_loop_running(sqlite_repo, temp_db):
    """Test other coroutines run while a save waits for a locked database."""
    sqlite_repo.get_connection().close()
    holder = sqlite3.connect(temp_db, isolation_level=None)
    holder.execute("BEGIN EXCLUSIVE")
    ticks = []

    async def release_after_ticks():
        for _ in range(5):
            await asyncio.sleep(0.02)
            ticks.append(1)
        holder.execute("COMMIT")
        holder.close()

    releaser = asyncio.create_task(release_after_ticks())
    await sqlite_repo.save_tasks(None, {"ideas": [make_task("a")]})
    await releaser

    assert len(ticks) == 5
    assert [t.id for t in await sqlite_repo.fetch_tasks_for_project(None)] == ["a"]


# --- Integration ---

@pytest.mark.asyncio
async def test_board_over_sqlite_end_to_end(sqlite_repo):
    """Test the ideas -> completed scenario against a real database."""
    board = Board.from_repository(sqlite_repo)
    t1 = await board.add_task("ideas", "T1")
    t2 = await board.add_task("ideas", "T2")

    await board.move_task("ideas", "completed", 0, 0)

    columns = await board.get_tasks()
    assert [(t.id, t.order) for t in columns["ideas"]] == [(t2.id, 0)]
    assert [(t.id, t.order, t.status) for t in columns["completed"]] == [
        (t1.id, 0, TaskStatus.DONE)
    ]


@pytest.mark.asyncio
async def test_project_board_over_sqlite(sqlite_repo):
    """Test project boards persist and the duplicate title check hits the database."""
    board = Board.from_repository(sqlite_repo)
    project = await board.create_project("Folio")
    project_board = await board.for_project(project.id)
    await project_board.add_task("in-progress", "Build it")

    with pytest.raises(exceptions.ConflictError):
        await board.create_project("folio")

    fetched = (await board.get_projects())[0]
    assert [t.title for t in fetched.tasks] == ["Build it"]
    assert fetched.tasks[0].status == TaskStatus.IN_PROGRESS
