from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import history_connection
from app.database.models import HistoryRecord


class HistoryRepository:
    """Database operations for the history table (conversation bookkeeping)."""

    def append_record(self, record: HistoryRecord) -> None:
        """Insert one history row."""
        with history_connection() as conn:
            conn.execute(
                """
                INSERT INTO history (ref, keyword, answer, ref_serialize, phone, options)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (
                    record.ref,
                    record.keyword,
                    record.answer,
                    record.ref_serialize,
                    record.phone,
                    Jsonb(record.options),
                ),
            )

    def last_record_for(self, phone: str) -> HistoryRecord | None:
        """Return the newest history row for a phone number, or None."""
        with history_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, ref, keyword, answer, ref_serialize, phone, options, created_at
                    FROM history
                    WHERE phone = %s
                    ORDER BY id DESC
                    LIMIT 1
                    """,
                    (phone,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return HistoryRecord(
            id=row["id"],
            ref=row["ref"] or "",
            keyword=row["keyword"] or "",
            answer=row["answer"] or "",
            ref_serialize=row["ref_serialize"] or "",
            phone=row["phone"],
            options=row["options"] or {},
            created_at=row["created_at"],
        )
