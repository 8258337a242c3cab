"""Storage backends for workflow instances."""

from __future__ import annotations

from typing import Optional

from ..config import PermitflowConfig, load_config
from .inmemory import InMemoryInstanceRepository
from .repository import InstanceRepository
from .sqlite import SQLiteInstanceRepository

try:  # pragma: no cover - optional dependency
    from .postgres import PostgresInstanceRepository
except ImportError:  # pragma: no cover - optional dependency
    PostgresInstanceRepository = None  # type: ignore

_POSTGRES_SCHEMES = ("postgres://", "postgresql://")
_SQLITE_SCHEME = "sqlite://"

_repository_instance: InstanceRepository | None = None


def open_repository(database_url: Optional[str]) -> InstanceRepository:
    """Build a new repository for ``database_url``.

    ``None`` or an empty URL selects the in-memory store; ``sqlite://<path>``
    and ``postgres(ql)://...`` select the durable backends.
    """
    if not database_url:
        return InMemoryInstanceRepository()
    if database_url.startswith(_SQLITE_SCHEME):
        return SQLiteInstanceRepository(database_url[len(_SQLITE_SCHEME):])
    if database_url.startswith(_POSTGRES_SCHEMES):
        if PostgresInstanceRepository is None:
            raise RuntimeError(
                "Postgres support requires asyncpg (pip install 'permitflow[postgres]')"
            )
        return PostgresInstanceRepository(database_url)
    raise ValueError(f"Unsupported database backend: {database_url}")


def get_repository(
    database_url: Optional[str] = None, config: Optional[PermitflowConfig] = None
) -> InstanceRepository:
    """Return the process-wide instance repository.

    An explicit ``database_url`` wins over the configured one (which already
    reflects ``PERMITFLOW_DATABASE_URL``/``DATABASE_URL``). Called with no
    arguments after the first build, the cached repository is returned.
    """

    global _repository_instance
    if _repository_instance is None or database_url is not None or config is not None:
        if database_url is None:
            database_url = (config or load_config()).database_url
        _repository_instance = open_repository(database_url)
    return _repository_instance


__all__ = [
    "InMemoryInstanceRepository",
    "InstanceRepository",
    "PostgresInstanceRepository",
    "SQLiteInstanceRepository",
    "get_repository",
    "open_repository",
]
