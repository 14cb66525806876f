# src/store/sqlite_store.py — v3
"""SQLite-based store (STORE_BACKEND=sqlite).

Uses stdlib sqlite3. Profiles are stored as JSON documents; attribute
entries keep their vector and membership in JSON columns under a
(signal, value) primary key, which enforces one entry per normalized value.
Average embeddings are mirrored into their own table so vector queries
never deserialize whole profiles.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import Iterator

import numpy as np

from candidaterank.core.errors import StoreError
from candidaterank.core.models import (
    AttributeEntry,
    Profile,
    ProfileMatch,
    Signal,
    SimilarityMatch,
)
from candidaterank.core.similarity import top_matches
from candidaterank.store.base_store import BaseStore

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS profiles (
    id TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    linkedin_url TEXT,
    github_login TEXT,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_linkedin_url ON profiles(linkedin_url);
CREATE INDEX IF NOT EXISTS idx_github_login ON profiles(github_login);

CREATE TABLE IF NOT EXISTS profile_averages (
    profile_id TEXT NOT NULL,
    signal TEXT NOT NULL,
    vector TEXT NOT NULL,
    PRIMARY KEY (profile_id, signal)
);
CREATE INDEX IF NOT EXISTS idx_averages_signal ON profile_averages(signal);

CREATE TABLE IF NOT EXISTS attributes (
    signal TEXT NOT NULL,
    value TEXT NOT NULL,
    vector TEXT NOT NULL,
    member_ids TEXT NOT NULL DEFAULT '[]',
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (signal, value)
);
"""


class SqliteStore(BaseStore):
    """SQLite-backed store; vector queries scan the rows of one signal."""

    def __init__(self, db_path: Path | str) -> None:
        if str(db_path) == ":memory:":
            target = ":memory:"
        else:
            path = Path(db_path).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            target = str(path)
        self._conn = sqlite3.connect(target)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as e:
            # A closed connection cannot roll back either.
            with suppress(sqlite3.Error):
                self._conn.rollback()
            raise StoreError(f"{operation} failed: {e}") from e

    def _fetchone(self, operation: str, sql: str, params: tuple | list = ()) -> tuple | None:
        with self._guard(operation):
            return self._conn.execute(sql, params).fetchone()

    def _fetchall(self, operation: str, sql: str, params: tuple | list = ()) -> list[tuple]:
        with self._guard(operation):
            return self._conn.execute(sql, params).fetchall()

    # --- Profiles ---

    def _load_profile(self, data: str) -> Profile | None:
        try:
            return Profile.model_validate_json(data)
        except ValueError as e:
            logger.warning("Failed to deserialize profile row: %s", e)
            return None

    async def get_profile(self, profile_id: str) -> Profile | None:
        row = self._fetchone(
            f"get_profile({profile_id})", "SELECT data FROM profiles WHERE id = ?", (profile_id,)
        )
        return self._load_profile(row[0]) if row else None

    async def get_profiles(self, profile_ids: list[str]) -> list[Profile]:
        profiles: list[Profile] = []
        for pid in profile_ids:
            profile = await self.get_profile(pid)
            if profile is not None:
                profiles.append(profile)
        return profiles

    async def find_profile_by_url(self, linkedin_url: str) -> Profile | None:
        row = self._fetchone(
            "find_profile_by_url",
            "SELECT data FROM profiles WHERE linkedin_url = ?",
            (linkedin_url,),
        )
        return self._load_profile(row[0]) if row else None

    async def find_profile_by_github(self, login: str) -> Profile | None:
        row = self._fetchone(
            "find_profile_by_github",
            "SELECT data FROM profiles WHERE github_login = ?",
            (login.lower(),),
        )
        return self._load_profile(row[0]) if row else None

    async def find_profiles_by_company(self, company_ids: list[str]) -> list[Profile]:
        if not company_ids:
            return []
        placeholders = ", ".join("?" for _ in company_ids)
        rows = self._fetchall(
            "find_profiles_by_company",
            f"""SELECT data FROM profiles WHERE EXISTS (
                    SELECT 1 FROM json_each(profiles.data, '$.company_ids')
                    WHERE json_each.value IN ({placeholders}))""",  # noqa: S608
            list(company_ids),
        )
        profiles = [self._load_profile(row[0]) for row in rows]
        return [p for p in profiles if p is not None]

    def _save_profile_row(self, profile: Profile) -> None:
        self._conn.execute(
            """INSERT OR REPLACE INTO profiles (id, data, linkedin_url, github_login)
               VALUES (?, ?, ?, ?)""",
            (
                profile.id,
                profile.model_dump_json(),
                profile.linkedin_url,
                profile.github_login.lower() if profile.github_login else None,
            ),
        )

    async def upsert_profile(self, profile: Profile) -> None:
        with self._guard(f"upsert_profile({profile.id})"):
            self._save_profile_row(profile)
            self._conn.execute(
                "DELETE FROM profile_averages WHERE profile_id = ?", (profile.id,)
            )
            self._conn.executemany(
                "INSERT INTO profile_averages (profile_id, signal, vector) VALUES (?, ?, ?)",
                [
                    (profile.id, signal.value, json.dumps(vector))
                    for signal, vector in profile.average_embeddings.items()
                ],
            )
            self._conn.commit()

    async def list_profile_ids(self) -> list[str]:
        return [row[0] for row in self._fetchall("list_profile_ids", "SELECT id FROM profiles")]

    # --- Attribute index ---

    async def get_attribute(self, signal: Signal, value: str) -> AttributeEntry | None:
        row = self._fetchone(
            f"get_attribute({signal.value}, {value!r})",
            "SELECT vector, member_ids FROM attributes WHERE signal = ? AND value = ?",
            (signal.value, value),
        )
        if row is None:
            return None
        return AttributeEntry(
            signal=signal,
            value=value,
            vector=json.loads(row[0]),
            member_ids=json.loads(row[1]),
        )

    async def insert_attribute(self, entry: AttributeEntry) -> AttributeEntry:
        with self._guard(f"insert_attribute({entry.signal.value}, {entry.value!r})"):
            self._conn.execute(
                """INSERT OR IGNORE INTO attributes (signal, value, vector, member_ids)
                   VALUES (?, ?, ?, ?)""",
                (
                    entry.signal.value,
                    entry.value,
                    json.dumps(entry.vector),
                    json.dumps(list(dict.fromkeys(entry.member_ids))),
                ),
            )
            self._conn.commit()
        stored = await self.get_attribute(entry.signal, entry.value)
        if stored is None:
            raise StoreError(f"Attribute {entry.value!r} missing after insert")
        return stored

    async def _write_members(self, signal: Signal, value: str, members: list[str]) -> None:
        with self._guard(f"update members of {signal.value}/{value!r}"):
            self._conn.execute(
                "UPDATE attributes SET member_ids = ? WHERE signal = ? AND value = ?",
                (json.dumps(members), signal.value, value),
            )
            self._conn.commit()

    async def add_attribute_member(
        self, signal: Signal, value: str, profile_id: str
    ) -> bool:
        entry = await self.get_attribute(signal, value)
        if entry is None:
            raise KeyError(f"No {signal.value} entry for {value!r}")
        if profile_id in entry.member_ids:
            return False
        await self._write_members(signal, value, [*entry.member_ids, profile_id])
        return True

    async def remove_attribute_member(
        self, signal: Signal, value: str, profile_id: str
    ) -> bool:
        entry = await self.get_attribute(signal, value)
        if entry is None or profile_id not in entry.member_ids:
            return False
        await self._write_members(
            signal, value, [m for m in entry.member_ids if m != profile_id]
        )
        return True

    async def count_attributes(self, signal: Signal) -> int:
        row = self._fetchone(
            f"count_attributes({signal.value})",
            "SELECT COUNT(*) FROM attributes WHERE signal = ?",
            (signal.value,),
        )
        return int(row[0])

    # --- Vector queries ---

    async def query_attributes(
        self, signal: Signal, vector: list[float], floor: float, top_k: int
    ) -> list[SimilarityMatch]:
        rows = self._fetchall(
            f"query_attributes({signal.value})",
            "SELECT value, vector, member_ids FROM attributes WHERE signal = ?",
            (signal.value,),
        )
        if not rows:
            return []
        members = {value: json.loads(m) for value, _, m in rows}
        matrix = np.asarray([json.loads(v) for _, v, _ in rows], dtype=np.float64)
        hits = top_matches(vector, [r[0] for r in rows], matrix, floor, top_k)
        return [
            SimilarityMatch(value=value, score=score, member_ids=members[value])
            for value, score in hits
        ]

    async def query_profile_averages(
        self, signal: Signal, vector: list[float], floor: float, top_k: int
    ) -> list[ProfileMatch]:
        rows = self._fetchall(
            f"query_profile_averages({signal.value})",
            "SELECT profile_id, vector FROM profile_averages WHERE signal = ?",
            (signal.value,),
        )
        if not rows:
            return []
        matrix = np.asarray([json.loads(v) for _, v in rows], dtype=np.float64)
        hits = top_matches(vector, [r[0] for r in rows], matrix, floor, top_k)
        return [ProfileMatch(profile_id=pid, score=score) for pid, score in hits]

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
