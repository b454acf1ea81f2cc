from duplicatable.repository.memory import InMemoryRepository, MemoryStore
from duplicatable.repository.sqlalchemy import SQLAlchemyRepository, build_schema

__all__ = [
    "InMemoryRepository",
    "MemoryStore",
    "SQLAlchemyRepository",
    "build_schema",
]
