from db.database import dispose_engine, get_engine, get_session, get_session_factory, init_db
from db.models import ArticleRow, SyncStateRow, TagRow
from db.stores import ArticleStore, SqlAlchemyUnitOfWork, SyncStateStore, TagStore

__all__ = [
    "get_engine",
    "get_session",
    "get_session_factory",
    "init_db",
    "dispose_engine",
    "ArticleRow",
    "TagRow",
    "SyncStateRow",
    "ArticleStore",
    "TagStore",
    "SyncStateStore",
    "SqlAlchemyUnitOfWork",
]
