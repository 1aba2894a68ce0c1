# =============================================================================
# Connection API Routes
# =============================================================================
#
# Endpoints (all authenticated):
#   GET    /connections                      - Accepted connections
#   GET    /connections/pending              - Incoming pending requests
#   POST   /connections/request              - Send a request
#   POST   /connections/accept/{id}          - Accept (addressee only)
#   POST   /connections/decline/{id}         - Decline (addressee only)
#   POST   /connections/block/{id}           - Block (either party)
#   DELETE /connections/{id}                 - Remove (either party)
#   GET    /connections/check/{other_user_id} - Connection status with a user
#
# =============================================================================

from datetime import datetime

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ladder.auth.context import AuthContext
from ladder.auth.policies import require_auth
from ladder.connections.graph import ConnectionGraph
from ladder.core.models import Connection, ConnectionStatus

router = APIRouter(prefix="/connections", tags=["connections"])


def get_connection_graph(request: Request) -> ConnectionGraph:
    return request.app.state.connection_graph


# =============================================================================
# Request/Response Models
# =============================================================================

class ConnectionRequest(BaseModel):
    addressee_id: int


class ConnectionView(BaseModel):
    """A connection from the point of view of one of its parties."""
    id: int
    requester_id: int
    addressee_id: int
    status: ConnectionStatus
    other_user_id: int
    direction: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def for_user(cls, connection: Connection, user_id: int) -> "ConnectionView":
        return cls(
            id=connection.id,
            requester_id=connection.requester_id,
            addressee_id=connection.addressee_id,
            status=connection.status,
            other_user_id=connection.other_party(user_id),
            direction=connection.direction_for(user_id),
            created_at=connection.created_at,
            updated_at=connection.updated_at,
        )


class ConnectionCheck(BaseModel):
    connected: bool
    status: ConnectionStatus | None = None


# =============================================================================
# Endpoints
# =============================================================================

@router.get("")
async def list_connections(
    ctx: AuthContext = Depends(require_auth()),
    graph: ConnectionGraph = Depends(get_connection_graph),
):
    rows = await graph.list_connections(ctx.user_id)
    return {"connections": [ConnectionView.for_user(row, ctx.user_id) for row in rows]}


@router.get("/pending")
async def list_pending(
    ctx: AuthContext = Depends(require_auth()),
    graph: ConnectionGraph = Depends(get_connection_graph),
):
    rows = await graph.list_pending(ctx.user_id)
    return {"pendingConnections": [ConnectionView.for_user(row, ctx.user_id) for row in rows]}


@router.post("/request")
async def request_connection(
    data: ConnectionRequest,
    ctx: AuthContext = Depends(require_auth()),
    graph: ConnectionGraph = Depends(get_connection_graph),
):
    connection = await graph.request_connection(ctx.user_id, data.addressee_id)
    return {
        "message": "Connection request sent successfully",
        "connection": ConnectionView.for_user(connection, ctx.user_id),
    }


@router.post("/accept/{connection_id}")
async def accept_connection(
    connection_id: int,
    ctx: AuthContext = Depends(require_auth()),
    graph: ConnectionGraph = Depends(get_connection_graph),
):
    connection = await graph.accept(connection_id, ctx.user_id)
    return {
        "message": "Connection accepted successfully",
        "connection": ConnectionView.for_user(connection, ctx.user_id),
    }


@router.post("/decline/{connection_id}")
async def decline_connection(
    connection_id: int,
    ctx: AuthContext = Depends(require_auth()),
    graph: ConnectionGraph = Depends(get_connection_graph),
):
    connection = await graph.decline(connection_id, ctx.user_id)
    return {
        "message": "Connection declined successfully",
        "connection": ConnectionView.for_user(connection, ctx.user_id),
    }


@router.post("/block/{connection_id}")
async def block_connection(
    connection_id: int,
    ctx: AuthContext = Depends(require_auth()),
    graph: ConnectionGraph = Depends(get_connection_graph),
):
    connection = await graph.block(connection_id, ctx.user_id)
    return {
        "message": "Connection blocked",
        "connection": ConnectionView.for_user(connection, ctx.user_id),
    }


@router.delete("/{connection_id}")
async def remove_connection(
    connection_id: int,
    ctx: AuthContext = Depends(require_auth()),
    graph: ConnectionGraph = Depends(get_connection_graph),
):
    await graph.remove(connection_id, ctx.user_id)
    return {"message": "Connection removed successfully"}


@router.get("/check/{other_user_id}", response_model=ConnectionCheck)
async def check_connection(
    other_user_id: int,
    ctx: AuthContext = Depends(require_auth()),
    graph: ConnectionGraph = Depends(get_connection_graph),
):
    status = await graph.status_between(ctx.user_id, other_user_id)
    return ConnectionCheck(connected=status == ConnectionStatus.ACCEPTED, status=status)
