"""Invocation repository: the public call record of registry operations."""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from common.logging_config import get_logger
from registry.database import get_db_connection

logger = get_logger(__name__)


@dataclass
class Invocation:
    invocation_id: str
    function: str
    args: List[str]
    status: str
    error_code: Optional[str]
    created_at: datetime


class InvocationRepository:
    """
    Stores operation name and positional arguments for each invocation.

    The transient map is deliberately absent from this table: the call
    record is replayable by anyone who can read it.
    """

    @staticmethod
    def record_invocation(
        invocation_id: str,
        function: str,
        args: List[str],
        status: str,
        error_code: Optional[str],
        created_at: datetime,
    ) -> Invocation:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO invocations (invocation_id, function, args, status, error_code, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (invocation_id, function, json.dumps(args), status, error_code, created_at.isoformat())
            )
            conn.commit()

        logger.debug(f"Recorded invocation {invocation_id} (function={function}, status={status})")

        return Invocation(
            invocation_id=invocation_id,
            function=function,
            args=list(args),
            status=status,
            error_code=error_code,
            created_at=created_at,
        )

    @staticmethod
    def get_recent(limit: int = 100) -> List[Invocation]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT invocation_id, function, args, status, error_code, created_at
                FROM invocations
                ORDER BY created_at DESC, rowid DESC
                LIMIT ?
                """,
                (limit,)
            )
            rows = cursor.fetchall()

            return [
                Invocation(
                    invocation_id=row["invocation_id"],
                    function=row["function"],
                    args=json.loads(row["args"]),
                    status=row["status"],
                    error_code=row["error_code"],
                    created_at=datetime.fromisoformat(row["created_at"]),
                )
                for row in rows
            ]
