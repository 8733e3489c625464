"""SQLAlchemy table definitions - dialect-agnostic (works with SQLite and PostgreSQL)."""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
)

# Metadata object for all tables
metadata = MetaData()

# ============================================================================
# BOOKS TABLE
# ============================================================================
books_table = Table(
    "books",
    metadata,
    Column("book_id", Integer, primary_key=True, autoincrement=True),
    Column("title", String, nullable=False),
    Column("author", String, nullable=False),
    Column("total_copies", Integer, nullable=False),
    Column("available_copies", Integer, nullable=False),
    Column("avg_rating", Float, nullable=False, default=0.0),
    Column("total_ratings", Integer, nullable=False, default=0),
    sqlite_autoincrement=True,  # ids are never reused after a removal
)


# ============================================================================
# USERS TABLE
# ============================================================================
users_table = Table(
    "users",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=False),  # caller-supplied
    Column("name", String, nullable=False),
    Column("is_defaulter", Boolean, nullable=False, default=False),
    Column("penalty_end", BigInteger, nullable=False, default=0),  # epoch seconds
)


# ============================================================================
# ISSUED TABLE (active loans)
# ============================================================================
issued_table = Table(
    "issued",
    metadata,
    Column("issue_id", Integer, primary_key=True, autoincrement=True),
    Column("book_id", Integer, ForeignKey("books.book_id"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.user_id"), nullable=False, unique=True),
    Column("issue_datetime", BigInteger, nullable=False),
    Column("due_datetime", BigInteger, nullable=False),
    sqlite_autoincrement=True,  # issue ids double as history keys
)

Index("idx_issued_book_id", issued_table.c.book_id)


# ============================================================================
# HISTORY TABLE (append-only)
# ============================================================================
history_table = Table(
    "history",
    metadata,
    Column("issue_id", Integer, primary_key=True, autoincrement=False),
    Column("book_id", Integer, nullable=False),
    Column("user_id", Integer, nullable=False),
    Column("title", String, nullable=False),
    Column("author", String, nullable=False),
    Column("issue_datetime", BigInteger, nullable=False),
    Column("return_datetime", BigInteger, nullable=False, default=0),
    Column("status", String(16), nullable=False),  # HistoryStatus as string
)
