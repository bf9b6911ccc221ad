import re
from collections.abc import Iterable, Mapping
from typing import Any

from .models import Book, ValidationFailure

ISBN_PATTERN = r"[0-9]{3}-[0-9]{10}"
INVALID_ISBN_MESSAGE = "Value was not a valid ISBN-13"

_isbn_re = re.compile(ISBN_PATTERN)


def _not_empty(field: str, display_name: str) -> ValidationFailure:
    return ValidationFailure(property_name=field, error_message=f"'{display_name}' must not be empty.")


def validate_book(book: Book) -> list[ValidationFailure]:
    """Check a book payload against the catalog rules.

    Returns one failure per broken rule, keyed by the JSON property name.
    An empty list means the book may be persisted.
    """
    failures: list[ValidationFailure] = []
    if not _isbn_re.fullmatch(book.isbn or ""):
        failures.append(ValidationFailure(property_name="isbn", error_message=INVALID_ISBN_MESSAGE))
    if not book.title.strip():
        failures.append(_not_empty("title", "Title"))
    if not book.author.strip():
        failures.append(_not_empty("author", "Author"))
    if book.page_count <= 0:
        failures.append(
            ValidationFailure(property_name="pageCount", error_message="'Page Count' must be greater than '0'.")
        )
    if book.release_date is None:
        failures.append(_not_empty("releaseDate", "Release Date"))
    return failures


def failures_from_request_errors(errors: Iterable[Mapping[str, Any]]) -> list[ValidationFailure]:
    failures = []
    for error in errors:
        loc = error.get("loc") or ("body",)
        field = loc[-1]
        if error.get("type") == "json_invalid" or not isinstance(field, str):
            field = "body"
        failures.append(ValidationFailure(property_name=field, error_message=error.get("msg", "Invalid value")))
    return failures
