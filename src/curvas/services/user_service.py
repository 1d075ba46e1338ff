"""Buyer and staff lookup: the identity collaborator the ticket ledger needs."""

from __future__ import annotations

from typing import Optional
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from curvas.core.clock import utcnow
from curvas.core.errors import (
    InvalidInputError,
    InvalidStateError,
    NotFoundError,
    translate_errors,
)
from curvas.models.user import ROLE_ADMIN, ROLE_CUSTOMER, ROLE_STAFF, USER_ROLES, User
from curvas.repositories.user_repo import UserRepository


def _normalize_email(email: str) -> str:
    return email.strip().lower()


@translate_errors("Error getting user")
async def get_user(session: AsyncSession, user_id: str) -> User:
    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User not found: {user_id}")
    return user


@translate_errors("Error creating user")
async def create_user(
    session: AsyncSession, name: str, email: str, role: str = ROLE_CUSTOMER
) -> User:
    if role not in USER_ROLES:
        raise InvalidInputError(f"role must be one of: {', '.join(USER_ROLES)}")
    if not email or "@" not in email:
        raise InvalidInputError("A valid email is required")
    repo = UserRepository(session)
    if await repo.get_by_email(email) is not None:
        raise InvalidStateError(f"A user with email {email} already exists")
    user = User(
        id=str(uuid4()),
        name=(name or "").strip() or _normalize_email(email),
        email=_normalize_email(email),
        role=role,
        created_at=utcnow(),
    )
    await repo.add(user)
    await session.flush()
    return user


@translate_errors("Error resolving buyer")
async def resolve_buyer(
    session: AsyncSession,
    customer_id: Optional[str] = None,
    name: Optional[str] = None,
    email: Optional[str] = None,
) -> User:
    """
    Existing user by id, else by email; an unknown email creates a customer.
    """
    if customer_id:
        return await get_user(session, customer_id)
    if not email:
        raise InvalidInputError("customer_id or buyer email is required")
    existing = await UserRepository(session).get_by_email(email)
    if existing is not None:
        return existing
    return await create_user(session, name or "", email, ROLE_CUSTOMER)


async def get_seller(session: AsyncSession, user_id: str) -> User:
    """Physical sales can only be attributed to staff or admins."""
    user = await get_user(session, user_id)
    if user.role not in (ROLE_STAFF, ROLE_ADMIN):
        raise InvalidInputError(f"User {user_id} is not staff and cannot sell tickets")
    return user
