import os
import sqlite3
from typing import List, Optional, Tuple

from fastapi import HTTPException

from photo_rating.models.person import Person

PEOPLE_TABLE = "people"


class SQLitePersistenceService:
    """
    A simple service for interacting with a raw sqlite3 db backend.
    (Chosen over SQLAlchemy for performance advantages)
    """

    def __init__(self, path: str):
        if not os.path.isdir(path):
            raise ValueError(f"SQL_LITE_PATH {path} is not a directory!")

        self._path = os.path.join(path, "people.db")
        self._connection = None

    def connect(self):
        if not self._connection:
            is_new = not os.path.isfile(self._path)
            # requests and startup hooks may run on different threads, access is serialized by the event loop
            self._connection = sqlite3.connect(self._path, check_same_thread=False)
            self._connection.execute("PRAGMA foreign_keys = ON;")
            if is_new:
                self._init_db()
        return self._connection

    def commit(self):
        self._connection.commit()

    def rollback(self):
        if self._connection:
            self._connection.rollback()

    def disconnect(self):
        if self._connection:
            self._connection.close()
            self._connection = None

    def person_exists(self, person_id: int) -> bool:
        con = self.connect()
        cur = con.cursor()
        cur.execute(f"""SELECT EXISTS(SELECT 1 FROM {PEOPLE_TABLE} WHERE id=?);""", (person_id,))
        return bool(cur.fetchone()[0])

    def insert_person(self, name: str, image_bytes: bytes, image_format: Optional[str]) -> int:
        con = self.connect()
        cur = con.cursor()
        cur.execute(
            f"""INSERT INTO {PEOPLE_TABLE} (name, image, image_format) values (?, ?, ?)""",
            (name, sqlite3.Binary(image_bytes), image_format),
        )
        return cur.lastrowid

    def read_person(self, person_id: int) -> Person:
        con = self.connect()
        cur = con.cursor()
        cur.execute(f"""SELECT id, name, image_format FROM {PEOPLE_TABLE} WHERE id=?;""", (person_id,))
        rows = cur.fetchall()
        if len(rows) == 0:
            raise HTTPException(status_code=404, detail=f"Person {person_id} does not exist.")
        row = rows[0]
        return Person(id=row[0], name=row[1], image_format=row[2])

    def read_people(self) -> List[Person]:
        con = self.connect()
        cur = con.cursor()
        cur.execute(f"""SELECT id, name, image_format FROM {PEOPLE_TABLE} ORDER BY name, id;""")
        return [Person(id=row[0], name=row[1], image_format=row[2]) for row in cur.fetchall()]

    def read_person_image(self, person_id: int) -> Tuple[bytes, Optional[str]]:
        con = self.connect()
        cur = con.cursor()
        cur.execute(f"""SELECT image, image_format FROM {PEOPLE_TABLE} WHERE id=?;""", (person_id,))
        rows = cur.fetchall()
        if len(rows) == 0 or rows[0][0] is None:
            raise HTTPException(status_code=404, detail=f"No image exists for person {person_id}.")
        row = rows[0]
        return bytes(row[0]), row[1]

    def delete_person(self, person_id: int):
        con = self.connect()
        cur = con.cursor()
        cur.execute(f"""DELETE FROM {PEOPLE_TABLE} WHERE id=?;""", (person_id,))
        if cur.rowcount == 0:
            raise HTTPException(status_code=404, detail=f"Person {person_id} does not exist.")

    def _init_db(self):
        cur = self._connection.cursor()
        cur.execute(
            f"""CREATE TABLE IF NOT EXISTS {PEOPLE_TABLE}
                           (id INTEGER PRIMARY KEY AUTOINCREMENT,
                            name TEXT NOT NULL,
                            image BLOB,
                            image_format TEXT
                            )"""
        )
        self.commit()
