"""Database module."""

from chatsync.db.session import create_engine, create_session_maker, init_db

__all__ = ["create_engine", "create_session_maker", "init_db"]
