from storeadmin.database.base import Base
from storeadmin.database.engine import build_engine, engine
from storeadmin.database.session import SessionLocal, get_db, session_scope

__all__ = ["Base", "SessionLocal", "build_engine", "engine", "get_db", "session_scope"]
