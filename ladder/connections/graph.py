"""
Connection graph.

Connections are mutual: one user requests, the other accepts. Rows keep
their direction (who asked whom) for accept/decline rights, but every
"are these two connected?" question treats the pair as unordered.
"""

from __future__ import annotations

import logging

from ladder.core.errors import (
    AlreadyConnected,
    AlreadyPending,
    Blocked,
    ConnectionNotFound,
    SelfConnection,
)
from ladder.core.models import Connection, ConnectionStatus
from ladder.storage.base import ConnectionStore

logger = logging.getLogger(__name__)

# Existing row status -> error raised on a new request for the same pair.
# A DECLINED pair may request again.
_REQUEST_CONFLICTS = {
    ConnectionStatus.ACCEPTED: AlreadyConnected,
    ConnectionStatus.PENDING: AlreadyPending,
    ConnectionStatus.BLOCKED: Blocked,
}


class ConnectionGraph:
    """Request/accept/decline/block lifecycle over a ConnectionStore."""

    def __init__(self, store: ConnectionStore):
        self.store = store

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def request_connection(self, requester_id: int, addressee_id: int) -> Connection:
        if requester_id == addressee_id:
            raise SelfConnection()

        existing = await self.store.find_between(requester_id, addressee_id)
        if existing is not None:
            conflict = _REQUEST_CONFLICTS.get(existing.status)
            if conflict is not None:
                raise conflict()
            # Declined: the old row gives way to a fresh request
            await self.store.delete(existing.id)

        connection = await self.store.create(requester_id, addressee_id, ConnectionStatus.PENDING)
        logger.info(
            f"Connection {connection.id} requested: {requester_id} -> {addressee_id}"
        )
        return connection

    async def accept(self, connection_id: int, acting_user_id: int) -> Connection:
        return await self._respond(connection_id, acting_user_id, ConnectionStatus.ACCEPTED)

    async def decline(self, connection_id: int, acting_user_id: int) -> Connection:
        return await self._respond(connection_id, acting_user_id, ConnectionStatus.DECLINED)

    async def _respond(
        self,
        connection_id: int,
        acting_user_id: int,
        status: ConnectionStatus,
    ) -> Connection:
        """Only the addressee of a pending row may answer it."""
        row = await self.store.get(connection_id)
        if (
            row is None
            or row.addressee_id != acting_user_id
            or row.status != ConnectionStatus.PENDING
        ):
            raise ConnectionNotFound()

        updated = await self.store.update_status(connection_id, status)
        if updated is None:
            raise ConnectionNotFound()
        logger.info(f"Connection {connection_id} {status.value} by user {acting_user_id}")
        return updated

    async def block(self, connection_id: int, acting_user_id: int) -> Connection:
        """Either party may block; blocked pairs cannot request again."""
        row = await self.store.get(connection_id)
        if row is None or not row.involves(acting_user_id):
            raise ConnectionNotFound("Connection not found")

        updated = await self.store.update_status(connection_id, ConnectionStatus.BLOCKED)
        if updated is None:
            raise ConnectionNotFound("Connection not found")
        logger.info(f"Connection {connection_id} blocked by user {acting_user_id}")
        return updated

    async def remove(self, connection_id: int, acting_user_id: int) -> None:
        """Either party may delete the row, whatever its status."""
        row = await self.store.get(connection_id)
        if row is None or not row.involves(acting_user_id):
            raise ConnectionNotFound("Connection not found")

        await self.store.delete(connection_id)
        logger.info(f"Connection {connection_id} removed by user {acting_user_id}")

    # =========================================================================
    # Queries
    # =========================================================================

    async def is_connected(self, user_a: int, user_b: int) -> bool:
        row = await self.store.find_between(user_a, user_b)
        return row is not None and row.status == ConnectionStatus.ACCEPTED

    async def status_between(self, user_a: int, user_b: int) -> ConnectionStatus | None:
        row = await self.store.find_between(user_a, user_b)
        return row.status if row else None

    async def list_connections(self, user_id: int) -> list[Connection]:
        """Accepted connections, most recently updated first."""
        rows = await self.store.list_for_user(user_id, ConnectionStatus.ACCEPTED)
        return sorted(rows, key=lambda c: c.updated_at, reverse=True)

    async def list_pending(self, user_id: int) -> list[Connection]:
        """Incoming requests waiting on this user, newest first."""
        rows = await self.store.list_for_user(user_id, ConnectionStatus.PENDING)
        incoming = [row for row in rows if row.addressee_id == user_id]
        return sorted(incoming, key=lambda c: c.created_at, reverse=True)
