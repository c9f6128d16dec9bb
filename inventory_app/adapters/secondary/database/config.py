from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base

# Postgres in production (the hosted backend's database), SQLite for local runs


def build_engine(database_url: str, **kwargs):
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args, pool_pre_ping=True, **kwargs)


Base = declarative_base()
