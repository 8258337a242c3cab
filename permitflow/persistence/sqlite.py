"""SQLite implementation of the instance repository."""

from __future__ import annotations

import asyncio
import json
import sqlite3
import threading
from pathlib import Path
from typing import Any, Optional

from ..errors import DuplicateActiveInstance, InstanceNotFound, StaleInstanceError
from ..models import InstanceStatus, WorkflowInstance
from .repository import InstanceRepository

_COLUMNS = "id, workflow_id, document_request_id, status, version, data"


class SQLiteInstanceRepository(InstanceRepository):
    """Persist workflow instances using SQLite.

    The full instance is stored as JSON next to the columns used for
    filtering. ``version`` implements optimistic concurrency and a partial
    unique index allows one live instance per document request.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._ensure_schema()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS workflow_instances (
                id TEXT PRIMARY KEY,
                workflow_id TEXT NOT NULL,
                document_request_id TEXT NOT NULL,
                status TEXT NOT NULL,
                assigned_to TEXT,
                priority TEXT NOT NULL,
                started_at TEXT NOT NULL,
                version INTEGER NOT NULL,
                data TEXT NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE UNIQUE INDEX IF NOT EXISTS ux_workflow_instances_live_request
            ON workflow_instances (document_request_id)
            WHERE status IN ('active', 'on_hold')
            """
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> int:
        with self._lock:
            cur = self._conn.cursor()
            try:
                cur.execute(query, params)
            except Exception:
                self._conn.rollback()
                raise
            self._conn.commit()
            return cur.rowcount

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(query, params)
            return cur.fetchone()

    def _fetchall(self, query: str, *params: Any) -> list[sqlite3.Row]:
        with self._lock:
            cur = self._conn.cursor()
            cur.execute(query, params)
            return cur.fetchall()

    @staticmethod
    def _to_instance(row: sqlite3.Row) -> WorkflowInstance:
        data = json.loads(row["data"])
        data["version"] = row["version"]
        return WorkflowInstance.model_validate(data)

    @staticmethod
    def _dump(instance: WorkflowInstance) -> str:
        return instance.model_dump_json(exclude={"version"})

    # ------------------------------------------------------------------
    # Repository API
    async def add_instance(self, instance: WorkflowInstance) -> None:
        try:
            await asyncio.to_thread(
                self._execute,
                """
                INSERT INTO workflow_instances
                    (id, workflow_id, document_request_id, status, assigned_to,
                     priority, started_at, version, data)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                instance.id,
                instance.workflow_id,
                instance.document_request_id,
                instance.status,
                instance.assigned_to,
                instance.priority,
                instance.started_at.isoformat(),
                instance.version,
                self._dump(instance),
            )
        except sqlite3.IntegrityError as exc:
            raise DuplicateActiveInstance(instance.document_request_id) from exc

    async def save_instance(self, instance: WorkflowInstance) -> None:
        updated = await asyncio.to_thread(
            self._execute,
            """
            UPDATE workflow_instances
            SET status = ?, assigned_to = ?, version = ?, data = ?
            WHERE id = ? AND version = ?
            """,
            instance.status,
            instance.assigned_to,
            instance.version + 1,
            self._dump(instance),
            instance.id,
            instance.version,
        )
        if updated == 0:
            exists = await asyncio.to_thread(
                self._fetchone,
                "SELECT id FROM workflow_instances WHERE id = ?",
                instance.id,
            )
            if exists is None:
                raise InstanceNotFound(instance.id)
            raise StaleInstanceError(instance.id, instance.version)
        instance.version += 1

    async def get_instance(self, instance_id: str) -> WorkflowInstance | None:
        row = await asyncio.to_thread(
            self._fetchone,
            f"SELECT {_COLUMNS} FROM workflow_instances WHERE id = ?",
            instance_id,
        )
        return self._to_instance(row) if row else None

    async def find_by_document_request(
        self, document_request_id: str
    ) -> list[WorkflowInstance]:
        rows = await asyncio.to_thread(
            self._fetchall,
            f"SELECT {_COLUMNS} FROM workflow_instances "
            "WHERE document_request_id = ? ORDER BY started_at, rowid",
            document_request_id,
        )
        return [self._to_instance(r) for r in rows]

    async def list_instances(
        self, status: Optional[InstanceStatus] = None
    ) -> list[WorkflowInstance]:
        if status is None:
            rows = await asyncio.to_thread(
                self._fetchall,
                f"SELECT {_COLUMNS} FROM workflow_instances ORDER BY started_at, rowid",
            )
        else:
            rows = await asyncio.to_thread(
                self._fetchall,
                f"SELECT {_COLUMNS} FROM workflow_instances "
                "WHERE status = ? ORDER BY started_at, rowid",
                status,
            )
        return [self._to_instance(r) for r in rows]
