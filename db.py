# db.py
from sqlmodel import SQLModel, create_engine, Session
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv
import os

load_dotenv()

DB_PATH = os.path.join(os.path.dirname(__file__), "data", "chatdesk.db")
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DB_PATH}")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

def make_engine(url: str):
    if not url.startswith("sqlite"):
        return create_engine(url, echo=SQL_ECHO, pool_pre_ping=True)
    kwargs = {"connect_args": {"check_same_thread": False}}
    # in-memory sqlite must share one connection across request threads
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(url, echo=SQL_ECHO, **kwargs)

engine = make_engine(DATABASE_URL)

def init_db():
    from services.models_db import Contact, Chat, Message  # import models here
    if engine.url.drivername.startswith("sqlite") and engine.url.database not in (None, "", ":memory:"):
        os.makedirs(os.path.dirname(os.path.abspath(engine.url.database)), exist_ok=True)
    SQLModel.metadata.create_all(engine)

def get_session():
    return Session(engine, expire_on_commit=False)
