"""SQLite-backed store for favorites, search history and the user profile."""

import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime

from photo_browser.domain.errors import PhotoStoreError
from photo_browser.domain.history import SearchHistoryRecord
from photo_browser.domain.photos import FavoritePhotoRecord
from photo_browser.domain.profile import PROFILE_UID, UserProfileRecord
from photo_browser.services.observable import ObservableValue
from photo_browser.services.photos import PhotoStore

_FAVORITES = "favorite_photos"
_HISTORY = "search_history"
_PROFILE = "user_profile"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS favorite_photos (
    id INTEGER PRIMARY KEY,
    photographer TEXT NOT NULL,
    photographer_url TEXT NOT NULL,
    width INTEGER NOT NULL,
    height INTEGER NOT NULL,
    url_original TEXT NOT NULL,
    url_large TEXT NOT NULL,
    url_medium TEXT NOT NULL,
    url_small TEXT NOT NULL,
    saved_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS search_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    search_query TEXT NOT NULL,
    searched_at TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS user_profile (
    uid INTEGER PRIMARY KEY,
    name TEXT,
    photo_uri TEXT
);
"""

_RECENT_ORDER = "ORDER BY searched_at DESC, id DESC"


@dataclass
class SqlitePhotoStore(PhotoStore):
    """SQLite implementation of the photo store.

    One connection is shared by every caller and guarded by a re-entrant
    lock. Writes commit at the end of the outermost ``atomic`` block, after
    which each changed table's observation stream re-emits once.
    """

    connection: sqlite3.Connection
    recent_limit: int = 10
    _lock: threading.RLock = field(
        default_factory=threading.RLock, init=False, repr=False
    )
    _depth: int = field(default=0, init=False, repr=False)
    _dirty: set[str] = field(default_factory=set, init=False, repr=False)

    def __post_init__(self) -> None:
        self.connection.row_factory = sqlite3.Row
        try:
            self.connection.executescript(_SCHEMA)
        except sqlite3.Error as exc:
            raise PhotoStoreError(f"Failed to initialise schema: {exc}") from exc
        self._favorites = ObservableValue(tuple(self.list_favorites()))
        self._recent = ObservableValue(
            tuple(self.list_recent_searches(self.recent_limit))
        )
        self._profile = ObservableValue(self.get_profile())

    @classmethod
    def open(cls, path: str, recent_limit: int = 10) -> "SqlitePhotoStore":
        """Open (or create) a store at ``path``."""
        connection = sqlite3.connect(path, check_same_thread=False)
        return cls(connection=connection, recent_limit=recent_limit)

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Run the enclosed writes as one transaction."""
        with self._lock:
            outermost = self._depth == 0
            self._depth += 1
            try:
                yield
            except BaseException as exc:
                if outermost:
                    self._dirty.clear()
                    try:
                        self.connection.rollback()
                    except sqlite3.Error as rollback_exc:
                        raise PhotoStoreError(
                            f"Rollback failed: {rollback_exc}"
                        ) from exc
                raise
            finally:
                self._depth -= 1
            if not outermost:
                return
            try:
                self.connection.commit()
            except sqlite3.Error as exc:
                self._dirty.clear()
                raise PhotoStoreError(str(exc)) from exc
            changed, self._dirty = self._dirty, set()
        self._notify(changed)

    def get_favorite(self, photo_id: int) -> FavoritePhotoRecord | None:
        """Return a favorite by id."""
        row = self._fetchone("SELECT * FROM favorite_photos WHERE id = ?", (photo_id,))
        if row is None:
            return None
        return _map_favorite(row)

    def is_favorite(self, photo_id: int) -> bool:
        """Return True when a favorite row exists."""
        row = self._fetchone(
            "SELECT EXISTS(SELECT 1 FROM favorite_photos WHERE id = ?)", (photo_id,)
        )
        return bool(row[0])

    def upsert_favorite(self, favorite: FavoritePhotoRecord) -> None:
        """Insert or replace a favorite row."""
        self._write(
            _FAVORITES,
            """
            INSERT OR REPLACE INTO favorite_photos
            (id, photographer, photographer_url, width, height,
             url_original, url_large, url_medium, url_small, saved_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                favorite.id,
                favorite.photographer,
                favorite.photographer_url,
                favorite.width,
                favorite.height,
                favorite.url_original,
                favorite.url_large,
                favorite.url_medium,
                favorite.url_small,
                favorite.saved_at.isoformat(),
            ),
        )

    def delete_favorite(self, photo_id: int) -> None:
        """Delete a favorite row."""
        self._write(_FAVORITES, "DELETE FROM favorite_photos WHERE id = ?", (photo_id,))

    def delete_all_favorites(self) -> None:
        """Delete all favorite rows."""
        self._write(_FAVORITES, "DELETE FROM favorite_photos")

    def list_favorites(self) -> list[FavoritePhotoRecord]:
        """Return favorites ordered by save time, newest first."""
        rows = self._fetchall(
            "SELECT * FROM favorite_photos ORDER BY saved_at DESC, id DESC"
        )
        return [_map_favorite(row) for row in rows]

    def count_favorites(self) -> int:
        """Return the number of favorites."""
        return int(self._fetchone("SELECT COUNT(*) FROM favorite_photos")[0])

    def insert_search(
        self, search_query: str, searched_at: datetime
    ) -> SearchHistoryRecord:
        """Insert a history row and return it with its assigned id."""
        with self.atomic():
            cursor = self._execute(
                "INSERT INTO search_history (search_query, searched_at) VALUES (?, ?)",
                (search_query, searched_at.isoformat()),
            )
            self._dirty.add(_HISTORY)
        return SearchHistoryRecord(
            id=int(cursor.lastrowid),
            search_query=search_query,
            searched_at=searched_at,
        )

    def delete_search(self, search_query: str) -> None:
        """Delete history rows matching the query text exactly."""
        self._write(
            _HISTORY,
            "DELETE FROM search_history WHERE search_query = ?",
            (search_query,),
        )

    def keep_recent_searches(self, limit: int) -> None:
        """Trim history to the most recent ``limit`` rows."""
        self._write(
            _HISTORY,
            f"""
            DELETE FROM search_history WHERE id NOT IN (
                SELECT id FROM search_history {_RECENT_ORDER} LIMIT ?
            )
            """,
            (limit,),
        )

    def list_recent_searches(self, limit: int) -> list[SearchHistoryRecord]:
        """Return the most recent history rows."""
        rows = self._fetchall(
            f"SELECT * FROM search_history {_RECENT_ORDER} LIMIT ?", (limit,)
        )
        return [_map_search(row) for row in rows]

    def search_history_prefix(
        self, prefix: str, limit: int
    ) -> list[SearchHistoryRecord]:
        """Return recent history rows whose query starts with ``prefix``."""
        rows = self._fetchall(
            f"""
            SELECT * FROM search_history
            WHERE search_query LIKE ? ESCAPE '\\'
            {_RECENT_ORDER} LIMIT ?
            """,
            (_like_prefix(prefix), limit),
        )
        return [_map_search(row) for row in rows]

    def clear_history(self) -> None:
        """Delete all history rows."""
        self._write(_HISTORY, "DELETE FROM search_history")

    def get_profile(self) -> UserProfileRecord | None:
        """Return the singleton profile row."""
        row = self._fetchone(
            "SELECT uid, name, photo_uri FROM user_profile WHERE uid = ?",
            (PROFILE_UID,),
        )
        if row is None:
            return None
        return UserProfileRecord(name=row["name"], photo_uri=row["photo_uri"])

    def upsert_profile(self, profile: UserProfileRecord) -> None:
        """Create or overwrite the singleton profile row."""
        self._write(
            _PROFILE,
            "INSERT OR REPLACE INTO user_profile (uid, name, photo_uri) "
            "VALUES (?, ?, ?)",
            (PROFILE_UID, profile.name, profile.photo_uri),
        )

    def observe_favorites(self) -> ObservableValue[tuple[FavoritePhotoRecord, ...]]:
        return self._favorites

    def observe_recent_searches(
        self,
    ) -> ObservableValue[tuple[SearchHistoryRecord, ...]]:
        return self._recent

    def observe_profile(self) -> ObservableValue[UserProfileRecord | None]:
        return self._profile

    def close(self) -> None:
        """Close observation streams and the connection."""
        for observable in (self._favorites, self._recent, self._profile):
            observable.close()
        with self._lock:
            self.connection.close()

    def _notify(self, tables: set[str]) -> None:
        if _FAVORITES in tables:
            self._favorites.set(tuple(self.list_favorites()))
        if _HISTORY in tables:
            self._recent.set(tuple(self.list_recent_searches(self.recent_limit)))
        if _PROFILE in tables:
            self._profile.set(self.get_profile())

    def _write(self, table: str, sql: str, params: tuple = ()) -> None:
        with self.atomic():
            self._execute(sql, params)
            self._dirty.add(table)

    def _fetchone(self, sql: str, params: tuple = ()) -> sqlite3.Row | None:
        with self._lock:
            return self._execute(sql, params).fetchone()

    def _fetchall(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self._execute(sql, params).fetchall()

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self.connection.execute(sql, params)
        except sqlite3.Error as exc:
            raise PhotoStoreError(str(exc)) from exc


def _like_prefix(prefix: str) -> str:
    escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"{escaped}%"


def _map_favorite(row: sqlite3.Row) -> FavoritePhotoRecord:
    return FavoritePhotoRecord(
        id=row["id"],
        photographer=row["photographer"],
        photographer_url=row["photographer_url"],
        width=row["width"],
        height=row["height"],
        url_original=row["url_original"],
        url_large=row["url_large"],
        url_medium=row["url_medium"],
        url_small=row["url_small"],
        saved_at=datetime.fromisoformat(row["saved_at"]),
    )


def _map_search(row: sqlite3.Row) -> SearchHistoryRecord:
    return SearchHistoryRecord(
        id=row["id"],
        search_query=row["search_query"],
        searched_at=datetime.fromisoformat(row["searched_at"]),
    )
