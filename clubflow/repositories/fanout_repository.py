# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Data-access layer for the broadcast outbox.

``fanout_intents`` holds one row per broadcast (the message to deliver);
``inbox_deliveries`` records every (intent, member) pair already delivered,
so an interrupted broadcast can be resumed without duplicates.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

INTENT_COLS = "id, announcement_id, status, delivered, failed, payload, created_at"


def _row_to_dict(row) -> Dict[str, Any]:
    return {
        "id": row[0],
        "announcement_id": row[1],
        "status": row[2],
        "delivered": row[3] or 0,
        "failed": row[4] or 0,
        "payload": json.loads(row[5]),
        "created_at": row[6],
    }


class FanoutRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    # ── Write ──────────────────────────────────────────────────────────

    def create_intent(self, intent_id: str, announcement_id: str,
                      payload: Dict[str, Any]) -> Dict[str, Any]:
        now_iso = datetime.now(timezone.utc).isoformat()
        with self._engine.begin() as conn:
            conn.execute(
                text(f"""
                    INSERT INTO fanout_intents ({INTENT_COLS})
                    VALUES (:id, :aid, 'pending', 0, 0, :payload, :ts)
                """),
                {"id": intent_id, "aid": announcement_id,
                 "payload": json.dumps(payload), "ts": now_iso},
            )
        return {"id": intent_id, "announcement_id": announcement_id, "status": "pending",
                "delivered": 0, "failed": 0, "payload": payload, "created_at": now_iso}

    def finish_intent(self, intent_id: str, status: str, failed: int) -> None:
        delivered = self.count_deliveries(intent_id)
        with self._engine.begin() as conn:
            conn.execute(
                text("""
                    UPDATE fanout_intents
                    SET status = :status, delivered = :delivered, failed = :failed
                    WHERE id = :id
                """),
                {"id": intent_id, "status": status, "delivered": delivered, "failed": failed},
            )

    def record_delivery(self, intent_id: str, member_id: str) -> bool:
        """Mark (intent, member) delivered. Returns False if it already was."""
        try:
            with self._engine.begin() as conn:
                conn.execute(
                    text("""
                        INSERT INTO inbox_deliveries (intent_id, member_id, delivered_at)
                        VALUES (:iid, :mid, :ts)
                    """),
                    {"iid": intent_id, "mid": member_id,
                     "ts": datetime.now(timezone.utc).isoformat()},
                )
        except IntegrityError:
            return False
        return True

    # ── Read ───────────────────────────────────────────────────────────

    def get_intent(self, intent_id: str) -> Optional[Dict[str, Any]]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text(f"SELECT {INTENT_COLS} FROM fanout_intents WHERE id = :id"),
                {"id": intent_id},
            ).fetchone()
        return _row_to_dict(row) if row else None

    def list_unfinished(self) -> List[Dict[str, Any]]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(f"""
                    SELECT {INTENT_COLS} FROM fanout_intents
                    WHERE status <> 'completed' ORDER BY created_at
                """),
            ).fetchall()
        return [_row_to_dict(r) for r in rows]

    def delivered_member_ids(self, intent_id: str) -> set:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text("SELECT member_id FROM inbox_deliveries WHERE intent_id = :iid"),
                {"iid": intent_id},
            ).fetchall()
        return {r[0] for r in rows}

    def count_deliveries(self, intent_id: str) -> int:
        with self._engine.connect() as conn:
            return conn.execute(
                text("SELECT COUNT(*) FROM inbox_deliveries WHERE intent_id = :iid"),
                {"iid": intent_id},
            ).scalar() or 0

    def clear(self) -> None:
        with self._engine.begin() as conn:
            conn.execute(text("DELETE FROM inbox_deliveries"))
            conn.execute(text("DELETE FROM fanout_intents"))
