"""SQLite-backed storage for notes, categories and tags."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
import sqlite3
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..models.note import Category, NoteRecord, Tag, TagRef
from .config import get_config
from .database import DatabaseService

logger = logging.getLogger(__name__)

UPDATABLE_NOTE_FIELDS = ("title", "content", "category_id", "is_favorite", "is_archived")

NOTE_SELECT = """
    SELECT
        n.id, n.title, n.content, n.created_at, n.updated_at,
        n.category_id, n.is_favorite, n.is_archived,
        c.name AS category_name, c.color AS category_color
    FROM notes n
    LEFT JOIN categories c ON c.id = n.category_id
"""


class NoteNotFoundError(LookupError):
    """Raised when a note id does not exist."""

    def __init__(self, note_id: int) -> None:
        super().__init__(f"Note not found: {note_id}")
        self.note_id = note_id


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _normalize_tag_names(names: Iterable[str]) -> List[str]:
    normalized: List[str] = []
    for name in names:
        cleaned = name.strip() if isinstance(name, str) else ""
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized


class NoteRepository:
    """CRUD access to the notebook database; also the corpus source for the search index."""

    def __init__(self, db_service: DatabaseService | None = None) -> None:
        self.db_service = db_service or DatabaseService(get_config().database_path)

    async def list_all(self) -> List[NoteRecord]:
        """Every non-archived note, most recently updated first."""
        return await asyncio.to_thread(self.find_all)

    def find_all(self) -> List[NoteRecord]:
        conn = self.db_service.connect()
        try:
            rows = conn.execute(
                NOTE_SELECT + " WHERE n.is_archived = 0 ORDER BY n.updated_at DESC, n.id DESC"
            ).fetchall()
            tags = self._tags_by_note(conn)
        finally:
            conn.close()
        return [self._row_to_note(row, tags.get(row["id"], [])) for row in rows]

    def find_by_id(self, note_id: int) -> NoteRecord:
        conn = self.db_service.connect()
        try:
            return self._load_note(conn, note_id)
        finally:
            conn.close()

    def create(
        self,
        *,
        title: str,
        content: str = "",
        category_id: Optional[int] = None,
        is_favorite: bool = False,
        tags: Sequence[str] = (),
    ) -> NoteRecord:
        """Insert a note (and its tags) and return it as stored."""
        now_iso = _utcnow_iso()
        conn = self.db_service.connect()
        try:
            with conn:
                cursor = conn.execute(
                    """
                    INSERT INTO notes (title, content, created_at, updated_at, category_id, is_favorite)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (title, content, now_iso, now_iso, category_id, int(is_favorite)),
                )
                note_id = int(cursor.lastrowid)
                if tags:
                    self._set_note_tags(conn, note_id, tags)
            note = self._load_note(conn, note_id)
        except sqlite3.IntegrityError as exc:
            raise ValueError(f"Invalid note reference: {exc}") from exc
        finally:
            conn.close()

        logger.info("Note created", extra={"note_id": note.id, "tags_count": len(note.tags)})
        return note

    def update(
        self,
        note_id: int,
        fields: Dict[str, Any],
        *,
        tags: Optional[Sequence[str]] = None,
    ) -> NoteRecord:
        """Update the given columns (and optionally replace tags); bumps ``updated_at``."""
        unknown = set(fields) - set(UPDATABLE_NOTE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        assignments = [f"{column} = ?" for column in fields]
        values: List[Any] = [
            int(value) if isinstance(value, bool) else value for value in fields.values()
        ]
        assignments.append("updated_at = ?")
        values.append(_utcnow_iso())

        conn = self.db_service.connect()
        try:
            with conn:
                cursor = conn.execute(
                    f"UPDATE notes SET {', '.join(assignments)} WHERE id = ?",
                    (*values, note_id),
                )
                if cursor.rowcount == 0:
                    raise NoteNotFoundError(note_id)
                if tags is not None:
                    self._set_note_tags(conn, note_id, tags)
            return self._load_note(conn, note_id)
        except sqlite3.IntegrityError as exc:
            raise ValueError(f"Invalid note reference: {exc}") from exc
        finally:
            conn.close()

    def delete(self, note_id: int) -> None:
        conn = self.db_service.connect()
        try:
            with conn:
                cursor = conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))
        finally:
            conn.close()
        if cursor.rowcount == 0:
            raise NoteNotFoundError(note_id)

    def count_notes(self, *, favorites_only: bool = False) -> int:
        query = "SELECT COUNT(*) FROM notes WHERE is_archived = 0"
        if favorites_only:
            query += " AND is_favorite = 1"
        conn = self.db_service.connect()
        try:
            return int(conn.execute(query).fetchone()[0])
        finally:
            conn.close()

    def list_categories(self) -> List[Category]:
        conn = self.db_service.connect()
        try:
            rows = conn.execute(
                "SELECT id, name, color, parent_id, created_at FROM categories ORDER BY name"
            ).fetchall()
        finally:
            conn.close()
        return [Category(**dict(row)) for row in rows]

    def create_category(self, name: str, color: str = "#6B7280", parent_id: Optional[int] = None) -> Category:
        conn = self.db_service.connect()
        try:
            with conn:
                cursor = conn.execute(
                    "INSERT INTO categories (name, color, parent_id, created_at) VALUES (?, ?, ?, ?)",
                    (name.strip(), color, parent_id, _utcnow_iso()),
                )
            row = conn.execute(
                "SELECT id, name, color, parent_id, created_at FROM categories WHERE id = ?",
                (cursor.lastrowid,),
            ).fetchone()
        except sqlite3.IntegrityError as exc:
            raise ValueError(f"Category '{name}' already exists or has an invalid parent") from exc
        finally:
            conn.close()
        return Category(**dict(row))

    def list_tags(self) -> List[Tag]:
        """Tags with the number of non-archived notes using them."""
        conn = self.db_service.connect()
        try:
            rows = conn.execute(
                """
                SELECT t.id, t.name, t.color, COUNT(n.id) AS count
                FROM tags t
                LEFT JOIN note_tags nt ON nt.tag_id = t.id
                LEFT JOIN notes n ON n.id = nt.note_id AND n.is_archived = 0
                GROUP BY t.id
                ORDER BY count DESC, t.name ASC
                """
            ).fetchall()
        finally:
            conn.close()
        return [Tag(**dict(row)) for row in rows]

    def _load_note(self, conn: sqlite3.Connection, note_id: int) -> NoteRecord:
        row = conn.execute(NOTE_SELECT + " WHERE n.id = ?", (note_id,)).fetchone()
        if row is None:
            raise NoteNotFoundError(note_id)
        tags = self._tags_by_note(conn, note_id)
        return self._row_to_note(row, tags.get(note_id, []))

    def _tags_by_note(
        self, conn: sqlite3.Connection, note_id: Optional[int] = None
    ) -> Dict[int, List[TagRef]]:
        query = """
            SELECT nt.note_id, t.id, t.name, t.color
            FROM note_tags nt
            JOIN tags t ON t.id = nt.tag_id
        """
        params: tuple[Any, ...] = ()
        if note_id is not None:
            query += " WHERE nt.note_id = ?"
            params = (note_id,)
        query += " ORDER BY t.name"

        grouped: Dict[int, List[TagRef]] = {}
        for row in conn.execute(query, params).fetchall():
            grouped.setdefault(row["note_id"], []).append(
                TagRef(id=row["id"], name=row["name"], color=row["color"])
            )
        return grouped

    def _set_note_tags(self, conn: sqlite3.Connection, note_id: int, names: Sequence[str]) -> None:
        """Replace a note's tags by name, creating missing tags."""
        conn.execute("DELETE FROM note_tags WHERE note_id = ?", (note_id,))
        for name in _normalize_tag_names(names):
            conn.execute(
                "INSERT OR IGNORE INTO tags (name, created_at) VALUES (?, ?)",
                (name, _utcnow_iso()),
            )
            tag_id = conn.execute("SELECT id FROM tags WHERE name = ?", (name,)).fetchone()[0]
            conn.execute(
                "INSERT OR IGNORE INTO note_tags (note_id, tag_id) VALUES (?, ?)",
                (note_id, tag_id),
            )

    @staticmethod
    def _row_to_note(row: sqlite3.Row, tags: List[TagRef]) -> NoteRecord:
        return NoteRecord(
            id=row["id"],
            title=row["title"],
            content=row["content"],
            category_id=row["category_id"],
            category_name=row["category_name"],
            category_color=row["category_color"],
            tags=tags,
            is_favorite=bool(row["is_favorite"]),
            is_archived=bool(row["is_archived"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


_note_repository: NoteRepository | None = None


def get_note_repository() -> NoteRepository:
    """Get or create the repository singleton, creating the schema on first use."""
    global _note_repository
    if _note_repository is None:
        db_service = DatabaseService(get_config().database_path)
        db_service.initialize()
        _note_repository = NoteRepository(db_service)
    return _note_repository


def reset_note_repository() -> None:
    global _note_repository
    _note_repository = None


__all__ = [
    "NoteNotFoundError",
    "NoteRepository",
    "get_note_repository",
    "reset_note_repository",
]
