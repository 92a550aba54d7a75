# Storage for role snapshots of departed members
import json
import sqlite3
from typing import List, Optional


class RoleSnapshotRepository:
    def __init__(self, db_path: str):
        self.db_path = db_path
        self._init_db()

    def _init_db(self):
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS previous_roles (
                guild_id TEXT NOT NULL,
                user_id TEXT NOT NULL,
                roles TEXT NOT NULL,
                PRIMARY KEY (guild_id, user_id)
            )
        """)
        conn.commit()
        conn.close()

    def save(self, guild_id: int, user_id: int, role_ids: List[int]):
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute(
            "INSERT OR REPLACE INTO previous_roles (guild_id, user_id, roles) VALUES (?, ?, ?)",
            (str(guild_id), str(user_id), json.dumps([str(role_id) for role_id in role_ids]))
        )
        conn.commit()
        conn.close()

    def load(self, guild_id: int, user_id: int) -> Optional[List[int]]:
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute(
            "SELECT roles FROM previous_roles WHERE guild_id = ? AND user_id = ?",
            (str(guild_id), str(user_id))
        )
        row = cursor.fetchone()
        conn.close()
        if row is None:
            return None
        return [int(role_id) for role_id in json.loads(row[0])]

    def delete(self, guild_id: int, user_id: int):
        conn = sqlite3.connect(self.db_path)
        cursor = conn.cursor()
        cursor.execute(
            "DELETE FROM previous_roles WHERE guild_id = ? AND user_id = ?",
            (str(guild_id), str(user_id))
        )
        conn.commit()
        conn.close()
