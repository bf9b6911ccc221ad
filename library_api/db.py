import logging

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

CREATE_BOOKS_TABLE = """
    CREATE TABLE IF NOT EXISTS Books (
        Isbn TEXT PRIMARY KEY,
        Title TEXT NOT NULL,
        Author TEXT NOT NULL,
        ShortDescription TEXT NOT NULL,
        PageCount TEXT NOT NULL,
        ReleaseDate TEXT NOT NULL)
"""


class DbConnectionFactory:
    def __init__(self, url: str):
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.engine: Engine = create_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args)

    def connect(self) -> Connection:
        return self.engine.connect()

    def dispose(self) -> None:
        self.engine.dispose()


class DatabaseInitializer:
    def __init__(self, connections: DbConnectionFactory):
        self.connections = connections

    def initialize(self) -> None:
        with self.connections.connect() as connection:
            connection.execute(text(CREATE_BOOKS_TABLE))
            connection.commit()
        logger.info("Books table ready")


def get_connection_factory(request: Request) -> DbConnectionFactory:
    return request.app.state.connection_factory
