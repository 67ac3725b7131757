"""ORM model for books in the collection."""

from sqlalchemy import Column, DateTime, Integer, String, func

from bookshelf.models.base import Base


class Book(Base):
    """
    One book in the collection.

    genre and author are free-text filter dimensions, not foreign keys.
    Timestamps are assigned by the database.
    """

    __tablename__ = "books"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False, index=True)
    genre = Column(String(100), nullable=True, index=True)
    published_year = Column(Integer, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
