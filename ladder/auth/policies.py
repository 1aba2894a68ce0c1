"""
Policies - the FastAPI interface to the AuthGate.

Usage in routes:

    @router.get("/users/{id}/settings")
    async def get_settings(ctx: AuthContext = Depends(require_ownership("id"))):
        ...

    @router.delete("/admin/users/{id}", dependencies=[Depends(require_admin())])
    async def delete_user(id: int):
        ...

Every factory returns a dependency that resolves to an AuthContext. Gates
built on `current_context` share it, so FastAPI's per-request dependency
cache keeps it to one identity lookup however many gates a route stacks.
Failures propagate as LadderError and are rendered by the API's
exception handler.
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Request

from ladder.auth.context import AuthContext
from ladder.auth.gate import AuthGate
from ladder.core.models import Role


# =============================================================================
# Gate resolution
# =============================================================================


def get_auth_gate(request: Request) -> AuthGate:
    """The gate attached to app.state by create_app."""
    return request.app.state.auth_gate


async def current_context(
    request: Request,
    gate: AuthGate = Depends(get_auth_gate),
) -> AuthContext:
    """Mandatory authentication."""
    return await gate.authenticate(
        request.headers.get("authorization"),
        path=request.url.path,
    )


async def optional_context(
    request: Request,
    gate: AuthGate = Depends(get_auth_gate),
) -> AuthContext:
    """Soft authentication: anonymous context instead of a 401."""
    return await gate.optional_authenticate(
        request.headers.get("authorization"),
        path=request.url.path,
    )


# =============================================================================
# Main Interface
# =============================================================================


def require_auth() -> Callable:
    """Just require authentication, no specific role."""
    return current_context


def optional_auth() -> Callable:
    """Never fails; resolves to an anonymous context when unauthenticated."""
    return optional_context


def require_role(role: Role | str) -> Callable:
    """Require an exact role."""

    async def dependency(ctx: AuthContext = Depends(current_context)) -> AuthContext:
        return AuthGate.require_role(ctx, role)

    return dependency


def require_any_role(*roles: Role | str) -> Callable:
    """Require ANY of the listed roles."""

    async def dependency(ctx: AuthContext = Depends(current_context)) -> AuthContext:
        return AuthGate.require_any_role(ctx, roles)

    return dependency


def require_admin() -> Callable:
    """Require admin rights (role or legacy flag)."""

    async def dependency(ctx: AuthContext = Depends(current_context)) -> AuthContext:
        return AuthGate.require_admin(ctx)

    return dependency


def require_ownership(param: str = "id") -> Callable:
    """
    Require that the path parameter `param` is the caller's own user id.

    Admins bypass the check.
    """

    async def dependency(
        request: Request,
        ctx: AuthContext = Depends(current_context),
    ) -> AuthContext:
        return AuthGate.require_ownership(ctx, request.path_params.get(param))

    return dependency
