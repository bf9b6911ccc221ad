import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from .db import DbConnectionFactory
from .models import Book

logger = logging.getLogger(__name__)

_SELECT_BOOKS = """
    SELECT Isbn AS isbn, Title AS title, Author AS author, ShortDescription AS short_description,
           PageCount AS page_count, ReleaseDate AS release_date
    FROM Books
"""


class BookService:
    """CRUD and title search over the Books table.

    Every call takes its own connection from the factory and gives it back
    before returning. Missing rows and duplicate ISBNs are reported through
    the return value; driver errors are left to propagate.
    """

    def __init__(self, connections: DbConnectionFactory):
        self.connections = connections

    def create(self, book: Book) -> bool:
        if self.get_by_isbn(book.isbn) is not None:
            return False

        with self.connections.connect() as connection:
            try:
                result = connection.execute(
                    text(
                        "INSERT INTO Books (Isbn, Title, Author, ShortDescription, PageCount, ReleaseDate) "
                        "VALUES (:isbn, :title, :author, :short_description, :page_count, :release_date)"
                    ),
                    self._to_params(book),
                )
                created = result.rowcount > 0
                connection.commit()
            except IntegrityError:
                connection.rollback()
                if self.get_by_isbn(book.isbn) is None:
                    raise
                logger.info("book.create.duplicate", extra={"isbn": book.isbn})
                return False

        if created:
            logger.info("book.created", extra={"isbn": book.isbn})
        return created

    def get_by_isbn(self, isbn: str) -> Book | None:
        with self.connections.connect() as connection:
            row = connection.execute(text(f"{_SELECT_BOOKS} WHERE Isbn = :isbn"), {"isbn": isbn}).mappings().first()
        return self._to_schema(row) if row is not None else None

    def get_all(self) -> list[Book]:
        with self.connections.connect() as connection:
            rows = connection.execute(text(_SELECT_BOOKS)).mappings().all()
        return [self._to_schema(row) for row in rows]

    def search_by_title(self, search_term: str) -> list[Book]:
        with self.connections.connect() as connection:
            rows = (
                connection.execute(text(f"{_SELECT_BOOKS} WHERE Title LIKE :term"), {"term": f"%{search_term}%"})
                .mappings()
                .all()
            )
        return [self._to_schema(row) for row in rows]

    def update(self, book: Book) -> bool:
        with self.connections.connect() as connection:
            result = connection.execute(
                text(
                    "UPDATE Books SET Title = :title, Author = :author, ShortDescription = :short_description, "
                    "PageCount = :page_count, ReleaseDate = :release_date WHERE Isbn = :isbn"
                ),
                self._to_params(book),
            )
            updated = result.rowcount > 0
            connection.commit()

        if updated:
            logger.info("book.updated", extra={"isbn": book.isbn})
        return updated

    def delete(self, isbn: str) -> bool:
        with self.connections.connect() as connection:
            result = connection.execute(text("DELETE FROM Books WHERE Isbn = :isbn"), {"isbn": isbn})
            deleted = result.rowcount > 0
            connection.commit()

        if deleted:
            logger.info("book.deleted", extra={"isbn": isbn})
        return deleted

    @staticmethod
    def _to_params(book: Book) -> dict[str, Any]:
        # PageCount and ReleaseDate are TEXT columns.
        return {
            "isbn": book.isbn,
            "title": book.title,
            "author": book.author,
            "short_description": book.short_description,
            "page_count": str(book.page_count),
            "release_date": book.release_date.isoformat() if book.release_date else None,
        }

    @staticmethod
    def _to_schema(row: Mapping[str, Any]) -> Book:
        return Book.model_validate(dict(row))
