"""SQLAlchemy adapter – relational key-value store backend."""
from flagkeeper.adapters.sqlalchemy.store import SqlAlchemyKeyValueStore

__all__ = ["SqlAlchemyKeyValueStore"]
