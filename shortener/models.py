"""SQLAlchemy ORM models for the URL shortener application.

Data Model Layout
=================
::
    urls table
    ├─ id (INTEGER PRIMARY KEY, autoincrement, storage-internal)
    ├─ alias (VARCHAR(64) UNIQUE NOT NULL, unique index)
    └─ url (TEXT NOT NULL)

How to Use
===========
**Step 1 — Import**::
    from shortener.models import URL

**Step 2 — Create a record**::
    session.add(URL(alias="ex1", url="https://example.com"))
    await session.commit()

**Step 3 — Query by alias**::
    result = await session.execute(select(URL.url).where(URL.alias == "ex1"))
    url = result.scalar_one_or_none()

Key Behaviours
===============
- The unique index on alias is what makes concurrent saves safe: the
  database accepts exactly one insert per alias.
- Records are append-only; nothing in the application updates or deletes them.
- Alias comparison uses the column's default (binary) collation, so lookups
  are case-sensitive on SQLite and PostgreSQL.

Classes:
    URL:  One alias → URL mapping.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from shortener.database import Base

__all__ = ["URL", "ALIAS_MAX_LENGTH"]

ALIAS_MAX_LENGTH = 64


class URL(Base):
    __tablename__ = "urls"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    alias: Mapped[str] = mapped_column(String(ALIAS_MAX_LENGTH), unique=True, index=True, nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<URL(id={self.id}, alias='{self.alias}')>"
