"""PostgreSQL implementation of the instance repository."""

from __future__ import annotations

import json
from typing import Optional

import asyncpg

from ..errors import DuplicateActiveInstance, InstanceNotFound, StaleInstanceError
from ..models import InstanceStatus, WorkflowInstance
from .repository import InstanceRepository

_COLUMNS = "id, workflow_id, document_request_id, status, version, data"


class PostgresInstanceRepository(InstanceRepository):
    """Persist workflow instances using PostgreSQL."""

    def __init__(self, dsn: str):
        self._dsn = dsn
        self._initialized = False

    async def _connect(self) -> asyncpg.Connection:
        conn = await asyncpg.connect(self._dsn)
        if not self._initialized:
            await self._ensure_schema(conn)
            self._initialized = True
        return conn

    async def _ensure_schema(self, conn: asyncpg.Connection) -> None:
        await conn.execute(
            """
            CREATE TABLE IF NOT EXISTS workflow_instances (
                id TEXT PRIMARY KEY,
                workflow_id TEXT NOT NULL,
                document_request_id TEXT NOT NULL,
                status TEXT NOT NULL,
                assigned_to TEXT,
                priority TEXT NOT NULL,
                started_at TIMESTAMPTZ NOT NULL,
                version INTEGER NOT NULL,
                data JSONB NOT NULL
            )
            """
        )
        await conn.execute(
            """
            CREATE UNIQUE INDEX IF NOT EXISTS ux_workflow_instances_live_request
            ON workflow_instances (document_request_id)
            WHERE status IN ('active', 'on_hold')
            """
        )

    @staticmethod
    def _to_instance(row: asyncpg.Record) -> WorkflowInstance:
        data = row["data"]
        if isinstance(data, str):
            data = json.loads(data)
        data["version"] = row["version"]
        return WorkflowInstance.model_validate(data)

    @staticmethod
    def _dump(instance: WorkflowInstance) -> str:
        return instance.model_dump_json(exclude={"version"})

    # ------------------------------------------------------------------
    async def add_instance(self, instance: WorkflowInstance) -> None:
        conn = await self._connect()
        try:
            await conn.execute(
                """
                INSERT INTO workflow_instances
                    (id, workflow_id, document_request_id, status, assigned_to,
                     priority, started_at, version, data)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9::jsonb)
                """,
                instance.id,
                instance.workflow_id,
                instance.document_request_id,
                instance.status,
                instance.assigned_to,
                instance.priority,
                instance.started_at,
                instance.version,
                self._dump(instance),
            )
        except asyncpg.UniqueViolationError as exc:
            raise DuplicateActiveInstance(instance.document_request_id) from exc
        finally:
            await conn.close()

    async def save_instance(self, instance: WorkflowInstance) -> None:
        conn = await self._connect()
        try:
            result = await conn.execute(
                """
                UPDATE workflow_instances
                SET status = $1, assigned_to = $2, version = $3, data = $4::jsonb
                WHERE id = $5 AND version = $6
                """,
                instance.status,
                instance.assigned_to,
                instance.version + 1,
                self._dump(instance),
                instance.id,
                instance.version,
            )
            if result == "UPDATE 0":
                exists = await conn.fetchval(
                    "SELECT 1 FROM workflow_instances WHERE id = $1", instance.id
                )
                if exists is None:
                    raise InstanceNotFound(instance.id)
                raise StaleInstanceError(instance.id, instance.version)
        finally:
            await conn.close()
        instance.version += 1

    async def get_instance(self, instance_id: str) -> WorkflowInstance | None:
        conn = await self._connect()
        try:
            row = await conn.fetchrow(
                f"SELECT {_COLUMNS} FROM workflow_instances WHERE id = $1",
                instance_id,
            )
        finally:
            await conn.close()
        return self._to_instance(row) if row else None

    async def find_by_document_request(
        self, document_request_id: str
    ) -> list[WorkflowInstance]:
        conn = await self._connect()
        try:
            rows = await conn.fetch(
                f"SELECT {_COLUMNS} FROM workflow_instances "
                "WHERE document_request_id = $1 ORDER BY started_at",
                document_request_id,
            )
        finally:
            await conn.close()
        return [self._to_instance(r) for r in rows]

    async def list_instances(
        self, status: Optional[InstanceStatus] = None
    ) -> list[WorkflowInstance]:
        conn = await self._connect()
        try:
            if status is None:
                rows = await conn.fetch(
                    f"SELECT {_COLUMNS} FROM workflow_instances ORDER BY started_at"
                )
            else:
                rows = await conn.fetch(
                    f"SELECT {_COLUMNS} FROM workflow_instances "
                    "WHERE status = $1 ORDER BY started_at",
                    status,
                )
        finally:
            await conn.close()
        return [self._to_instance(r) for r in rows]
