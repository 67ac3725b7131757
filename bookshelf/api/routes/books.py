"""Book listing, lookup, CRUD and aggregate endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, status

from bookshelf.api.deps import authenticate_token, get_book_repository, optional_auth, require_database
from bookshelf.core.errors import NotFound, ValidationFailed
from bookshelf.repositories.book_query import paginate
from bookshelf.repositories.books import BookRepository, NoFieldsToUpdateError
from bookshelf.schemas.auth import CurrentUser
from bookshelf.schemas.books import (
    BookCreate,
    BookDataResponse,
    BookListResponse,
    BookMutationResponse,
    BookOut,
    BookUpdate,
    StatsResponse,
    StringListResponse,
)
from bookshelf.schemas.common import MessageResponse
from bookshelf.services.book_filters import parse_book_filters

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_database)])

Repository = Annotated[BookRepository, Depends(get_book_repository)]
Authenticated = Annotated[CurrentUser, Depends(authenticate_token)]
BookId = Annotated[int, Path(ge=1, le=2**31 - 1)]

BOOK_NOT_FOUND = "Book not found"


@router.get("", response_model=BookListResponse, response_model_by_alias=True)
def list_books(
    request: Request,
    repo: Repository,
    viewer: Annotated[CurrentUser | None, Depends(optional_auth)],
) -> BookListResponse:
    """
    Paged listing, newest first.

    Query: page, limit, search, genre, author, year. Repeat genre or author to match
    any of several exact values.
    """
    filters = parse_book_filters(request.query_params)
    logger.debug("Book listing", extra={"viewer_id": viewer.id if viewer else None})
    rows, total = repo.list_books(filters)
    info = paginate(total, filters.limit, filters.offset)
    return BookListResponse(
        data=[BookOut.model_validate(row) for row in rows],
        total=total,
        page=info.page,
        total_pages=info.total_pages,
        has_next=info.has_next,
        has_prev=info.has_prev,
    )


@router.get("/stats", response_model=StatsResponse, response_model_by_alias=True)
def get_stats(repo: Repository) -> StatsResponse:
    return StatsResponse(data=repo.stats())


@router.get("/filters/genres", response_model=StringListResponse)
def get_genres(repo: Repository) -> StringListResponse:
    return StringListResponse(data=repo.distinct_genres())


@router.get("/filters/authors", response_model=StringListResponse)
def get_authors(repo: Repository) -> StringListResponse:
    return StringListResponse(data=repo.distinct_authors())


@router.get("/{book_id}", response_model=BookDataResponse)
def get_book(book_id: BookId, repo: Repository) -> BookDataResponse:
    book = repo.get(book_id)
    if book is None:
        raise NotFound(BOOK_NOT_FOUND)
    return BookDataResponse(data=BookOut.model_validate(book))


@router.post("", response_model=BookMutationResponse, status_code=status.HTTP_201_CREATED)
def create_book(body: BookCreate, repo: Repository, _user: Authenticated) -> BookMutationResponse:
    book = repo.create(body.model_dump())
    return BookMutationResponse(data=BookOut.model_validate(book), message="Book created successfully")


@router.put("/{book_id}", response_model=BookMutationResponse)
def update_book(
    book_id: BookId,
    body: BookUpdate,
    repo: Repository,
    _user: Authenticated,
) -> BookMutationResponse:
    try:
        book = repo.update(book_id, body.changes())
    except NoFieldsToUpdateError as e:
        raise ValidationFailed(e.message) from None
    if book is None:
        raise NotFound(BOOK_NOT_FOUND)
    return BookMutationResponse(data=BookOut.model_validate(book), message="Book updated successfully")


@router.delete("/{book_id}", response_model=MessageResponse)
def delete_book(book_id: BookId, repo: Repository, _user: Authenticated) -> MessageResponse:
    if not repo.delete(book_id):
        raise NotFound(BOOK_NOT_FOUND)
    return MessageResponse(message="Book deleted successfully")
