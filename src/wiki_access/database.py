"""SQLite storage for profiles, clients and client team membership."""

import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

ADMIN_ROLE = "admin"


class MembershipDatabase:
    """Manages the SQLite database the viewer context is built from."""

    def __init__(self, db_path: Path) -> None:
        """Initialise database with the given path.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._initialise_schema()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections.

        Yields:
            SQLite connection with Row factory and foreign keys enabled.
        """
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    def _initialise_schema(self) -> None:
        """Create database schema if it doesn't exist."""
        with self._get_connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS profiles (
                    id TEXT PRIMARY KEY,
                    role TEXT NOT NULL DEFAULT 'employee',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                CREATE TABLE IF NOT EXISTS clients (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    slug TEXT UNIQUE NOT NULL,
                    name TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS clients_team (
                    client_id INTEGER NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
                    user_id TEXT NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
                    PRIMARY KEY (client_id, user_id)
                );

                CREATE INDEX IF NOT EXISTS idx_clients_team_user ON clients_team(user_id);
            """)
            conn.commit()

    def upsert_profile(self, user_id: str, role: str = "employee") -> None:
        """Insert or update a user profile.

        Args:
            user_id: Subject id of the user.
            role: Role name, ``admin`` grants full documentation access.
        """
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO profiles (id, role) VALUES (?, ?)
                ON CONFLICT(id) DO UPDATE SET role = excluded.role
                """,
                (user_id, role),
            )
            conn.commit()

    def upsert_client(self, slug: str, name: str | None = None) -> int:
        """Insert or update a client.

        Args:
            slug: Client slug used in documentation paths and access rules.
            name: Display name, defaults to the slug.

        Returns:
            Id of the client row.
        """
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO clients (slug, name) VALUES (?, ?)
                ON CONFLICT(slug) DO UPDATE SET name = excluded.name
                """,
                (slug, name or slug),
            )
            conn.commit()
            row = conn.execute("SELECT id FROM clients WHERE slug = ?", (slug,)).fetchone()
            return int(row["id"])

    def add_team_member(self, slug: str, user_id: str) -> None:
        """Add a user to a client's team.

        Args:
            slug: Client slug.
            user_id: Subject id of the user.

        Raises:
            LookupError: If the client or the profile does not exist.
        """
        with self._get_connection() as conn:
            client = conn.execute("SELECT id FROM clients WHERE slug = ?", (slug,)).fetchone()
            if client is None:
                msg = f"Unknown client: {slug}"
                raise LookupError(msg)
            profile = conn.execute("SELECT id FROM profiles WHERE id = ?", (user_id,)).fetchone()
            if profile is None:
                msg = f"Unknown profile: {user_id}"
                raise LookupError(msg)
            conn.execute(
                "INSERT OR IGNORE INTO clients_team (client_id, user_id) VALUES (?, ?)",
                (client["id"], user_id),
            )
            conn.commit()

    def remove_team_member(self, slug: str, user_id: str) -> None:
        """Remove a user from a client's team, if present."""
        with self._get_connection() as conn:
            conn.execute(
                """
                DELETE FROM clients_team
                WHERE user_id = ? AND client_id = (SELECT id FROM clients WHERE slug = ?)
                """,
                (user_id, slug),
            )
            conn.commit()

    def is_admin(self, user_id: str) -> bool:
        """Return True when the user's profile has the admin role."""
        with self._get_connection() as conn:
            row = conn.execute("SELECT role FROM profiles WHERE id = ?", (user_id,)).fetchone()
            return row is not None and row["role"] == ADMIN_ROLE

    def get_user_client_slugs(self, user_id: str) -> list[str]:
        """Return the slugs of the clients whose team the user belongs to.

        Args:
            user_id: Subject id of the user.

        Returns:
            Client slugs sorted alphabetically.
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT c.slug
                FROM clients_team t
                JOIN clients c ON c.id = t.client_id
                WHERE t.user_id = ?
                ORDER BY c.slug
                """,
                (user_id,),
            )
            return [row["slug"] for row in cursor.fetchall()]
