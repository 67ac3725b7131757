"""Request/response schemas for book endpoints."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

TITLE_MAX_LENGTH = 255
AUTHOR_MAX_LENGTH = 255
GENRE_MAX_LENGTH = 100
MIN_PUBLISHED_YEAR = 1000


def _required_text(value: str, name: str, max_length: int) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{name} is required")
    if len(value) > max_length:
        raise ValueError(f"{name} must be at most {max_length} characters")
    return value


def _optional_genre(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if len(value) > GENRE_MAX_LENGTH:
        raise ValueError(f"Genre must be at most {GENRE_MAX_LENGTH} characters")
    return value


def _optional_year(value: int | None) -> int | None:
    # Upper bound moves with the calendar, so it cannot be a static Field(le=...).
    if value is None:
        return None
    current_year = date.today().year
    if not MIN_PUBLISHED_YEAR <= value <= current_year:
        raise ValueError(f"Published year must be between {MIN_PUBLISHED_YEAR} and {current_year}")
    return value


class BookCreate(BaseModel):
    """Payload for POST /books."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Author name")
    genre: str | None = Field(default=None, description="Free-text genre")
    published_year: int | None = Field(default=None, description="Year of publication")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _required_text(v, "Title", TITLE_MAX_LENGTH)

    @field_validator("author")
    @classmethod
    def validate_author(cls, v: str) -> str:
        return _required_text(v, "Author", AUTHOR_MAX_LENGTH)

    @field_validator("genre")
    @classmethod
    def validate_genre(cls, v: str | None) -> str | None:
        return _optional_genre(v)

    @field_validator("published_year")
    @classmethod
    def validate_published_year(cls, v: int | None) -> int | None:
        return _optional_year(v)


class BookUpdate(BaseModel):
    """
    Payload for PUT /books/{id}. Only fields present in the body are written;
    genre and published_year may be set to null explicitly, title and author may not.
    """

    model_config = ConfigDict(extra="ignore")

    title: str | None = None
    author: str | None = None
    genre: str | None = None
    published_year: int | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("Title cannot be null")
        return _required_text(v, "Title", TITLE_MAX_LENGTH)

    @field_validator("author")
    @classmethod
    def validate_author(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("Author cannot be null")
        return _required_text(v, "Author", AUTHOR_MAX_LENGTH)

    @field_validator("genre")
    @classmethod
    def validate_genre(cls, v: str | None) -> str | None:
        return _optional_genre(v)

    @field_validator("published_year")
    @classmethod
    def validate_published_year(cls, v: int | None) -> int | None:
        return _optional_year(v)

    def changes(self) -> dict:
        """Fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class BookOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    author: str
    genre: str | None = None
    published_year: int | None = None
    created_at: datetime
    updated_at: datetime


class BookStats(BaseModel):
    """Aggregate counts shown on the dashboard and by GET /books/stats."""

    model_config = ConfigDict(populate_by_name=True)

    total_books: int = Field(default=0, alias="totalBooks")
    total_authors: int = Field(default=0, alias="totalAuthors")
    total_genres: int = Field(default=0, alias="totalGenres")
    recent_books: int = Field(default=0, alias="recentBooks")


class BookDataResponse(BaseModel):
    success: bool = True
    data: BookOut


class BookMutationResponse(BookDataResponse):
    message: str


class BookListResponse(BaseModel):
    """Paged listing; serialized with camelCase page metadata."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    data: list[BookOut]
    total: int
    page: int
    total_pages: int = Field(alias="totalPages")
    has_next: bool = Field(alias="hasNext")
    has_prev: bool = Field(alias="hasPrev")


class StatsResponse(BaseModel):
    success: bool = True
    data: BookStats


class StringListResponse(BaseModel):
    success: bool = True
    data: list[str]
