from typing import List

from fastapi import APIRouter, Depends, FastAPI, Query, Request, Response, status
from fastapi.responses import JSONResponse

from .auth import ApiKeyVerifier, require_api_key
from .config import Settings
from .db import DbConnectionFactory, get_connection_factory
from .models import Book, ValidationFailure
from .service import BookService
from .validation import validate_book

DUPLICATE_ISBN_MESSAGE = "A book with that Isbn already exists."

router = APIRouter(prefix="/books", tags=["Books"])

validation_responses = {status.HTTP_400_BAD_REQUEST: {"model": List[ValidationFailure]}}
not_found_responses = {status.HTTP_404_NOT_FOUND: {"description": "Book not found"}}


def add_services(app: FastAPI, settings: Settings) -> None:
    app.state.connection_factory = DbConnectionFactory(settings.database_url)
    app.state.api_key_verifier = ApiKeyVerifier(settings.api_key)


def define_endpoints(app: FastAPI) -> None:
    app.include_router(router)


def get_book_service(connections: DbConnectionFactory = Depends(get_connection_factory)) -> BookService:
    return BookService(connections)


def bad_request(failures: List[ValidationFailure]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=[failure.model_dump(by_alias=True) for failure in failures],
    )


@router.post(
    "",
    name="create_book",
    response_model=Book,
    status_code=status.HTTP_201_CREATED,
    responses=validation_responses,
    dependencies=[Depends(require_api_key)],
)
def create_book(book: Book, request: Request, response: Response, service: BookService = Depends(get_book_service)):
    failures = validate_book(book)
    if failures:
        return bad_request(failures)

    if not service.create(book):
        return bad_request([ValidationFailure(property_name="isbn", error_message=DUPLICATE_ISBN_MESSAGE)])

    response.headers["Location"] = str(request.app.url_path_for("get_book", isbn=book.isbn))
    return book


@router.put(
    "/{isbn}",
    name="update_book",
    response_model=Book,
    responses={**validation_responses, **not_found_responses},
    dependencies=[Depends(require_api_key)],
)
def update_book(isbn: str, book: Book, service: BookService = Depends(get_book_service)):
    book = book.model_copy(update={"isbn": isbn})
    failures = validate_book(book)
    if failures:
        return bad_request(failures)

    if not service.update(book):
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return book


@router.get("", name="get_books", response_model=List[Book])
def get_books(
    search_term: str | None = Query(default=None, alias="searchTerm"),
    service: BookService = Depends(get_book_service),
) -> List[Book]:
    if search_term:
        return service.search_by_title(search_term)
    return service.get_all()


@router.get("/{isbn}", name="get_book", response_model=Book, responses=not_found_responses)
def get_book(isbn: str, service: BookService = Depends(get_book_service)):
    book = service.get_by_isbn(isbn)
    if book is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return book


@router.delete(
    "/{isbn}",
    name="delete_book",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=not_found_responses,
    dependencies=[Depends(require_api_key)],
)
def delete_book(isbn: str, service: BookService = Depends(get_book_service)) -> Response:
    if not service.delete(isbn):
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
