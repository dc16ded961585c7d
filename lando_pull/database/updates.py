"""
Post-import database updates using mysql-connector-python.

Each configured :class:`DatabaseUpdate` becomes one parameterized
``UPDATE`` statement. Statements run in configured order over a single
connection; a failing statement is logged and the remaining updates
still run.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Sequence, Tuple

import mysql.connector
from mysql.connector import Error as MySQLError

from lando_pull.core.exceptions import UpdateError
from lando_pull.models.config import Condition, DatabaseUpdate, LocalEndpoint

logger = logging.getLogger(__name__)


def _condition_clause(condition: Condition) -> Tuple[str, List[Any]]:
    if condition.is_set_operator:
        values = condition.value if isinstance(condition.value, list) else [condition.value]
        placeholders = ",".join("?" for _ in values)
        return f"{condition.column} IN ({placeholders})", list(values)

    value = condition.value
    if isinstance(value, list):
        value = ",".join(str(v) for v in value)
    return f"{condition.column} {condition.operator} ?", [value]


def build_update_query(update: DatabaseUpdate) -> Tuple[str, List[Any]]:
    """
    Build the SQL statement and bound parameters for one update.

    The SET value is always the first parameter, followed by the
    condition values in configured order.

    Args:
        update: Update rule

    Returns:
        Tuple of (query, params)
    """
    query = f"UPDATE {update.table} SET {update.column} = ?"
    params: List[Any] = [update.value]

    clauses = []
    for condition in update.conditions:
        clause, values = _condition_clause(condition)
        clauses.append(clause)
        params.extend(values)

    if clauses:
        query += " WHERE " + " AND ".join(clauses)

    return query, params


@dataclass
class UpdateReport:
    """Outcome of applying the configured updates."""
    applied: List[Tuple[str, int]] = field(default_factory=list)
    failed: List[UpdateError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed


class DatabaseUpdater:
    """
    Applies database updates to the freshly imported local database.

    Args:
        local: Local endpoint with connection parameters
        connect: Connection factory, defaults to ``mysql.connector.connect``
    """

    def __init__(self, local: LocalEndpoint, connect: Optional[Callable[..., Any]] = None):
        self.local = local
        self._connect = connect or mysql.connector.connect

    def _create_connection_config(self) -> dict:
        return {
            'host': self.local.db_host,
            'port': self.local.db_port,
            'user': self.local.db_user,
            'password': self.local.db_password,
            'database': self.local.db_name,
        }

    async def apply(self, updates: Optional[Sequence[DatabaseUpdate]] = None) -> UpdateReport:
        """
        Apply updates sequentially in a worker thread.

        Args:
            updates: Updates to apply, defaults to the configured list

        Returns:
            UpdateReport listing applied and failed updates

        Raises:
            UpdateError: If the database connection cannot be opened
        """
        updates = list(self.local.database_updates if updates is None else updates)
        if not updates:
            logger.warning("No database updates configured, skipping")
            return UpdateReport()

        return await asyncio.to_thread(self._apply, updates)

    def _apply(self, updates: List[DatabaseUpdate]) -> UpdateReport:
        try:
            conn = self._connect(**self._create_connection_config())
        except MySQLError as e:
            raise UpdateError(
                f"Failed to connect to local database: {e}",
                details={'host': self.local.db_host, 'port': self.local.db_port}
            ) from e

        report = UpdateReport()
        try:
            for update in updates:
                query, params = build_update_query(update)
                logger.info(f"Executing query: {query}")
                logger.debug(f"With params: {params}")

                cursor = None
                try:
                    cursor = conn.cursor(prepared=True)
                    cursor.execute(query, params)
                    conn.commit()
                    rows = cursor.rowcount
                    report.applied.append((update.table, rows))
                    logger.info(f"Updated {rows} rows in {update.table}")
                except MySQLError as e:
                    error = UpdateError(
                        f"Failed to update {update.table}: {e}",
                        details={'table': update.table, 'column': update.column, 'query': query}
                    )
                    report.failed.append(error)
                    logger.error(error.message)
                finally:
                    if cursor is not None:
                        cursor.close()
        finally:
            conn.close()

        return report
