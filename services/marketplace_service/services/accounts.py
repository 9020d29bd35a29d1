"""Registration and login."""

import uuid
from dataclasses import dataclass
from typing import Optional

from libs.auth.security import create_access_token, hash_password, verify_password
from libs.common.errors import AuthenticationError, ConflictError, NotFoundError
from libs.common.logging import get_logger
from services.marketplace_service.models import User, UserRole
from services.marketplace_service.services.vendor_lifecycle import (
    claim_approved_application,
)
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass
class Session:
    user: User
    access_token: str
    vendor_id: Optional[uuid.UUID] = None


def issue_token(user: User) -> str:
    return create_access_token(
        user_id=str(user.id), email=user.email, role=user.role.value
    )


async def find_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def register(
    db: AsyncSession,
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
) -> Session:
    """Create a customer account.

    If an application with this email was approved before the account existed,
    the new user becomes its vendor straight away.
    """
    email = email.strip().lower()
    if await find_user_by_email(db, email) is not None:
        raise ConflictError("An account with this email already exists")

    user = User(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        role=UserRole.CUSTOMER,
    )
    db.add(user)
    try:
        await db.flush()
        vendor_id = await claim_approved_application(db, user)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("An account with this email already exists")

    await db.refresh(user)
    logger.info("Registered user %s (%s)", user.id, user.role.value)
    return Session(user=user, access_token=issue_token(user), vendor_id=vendor_id)


async def login(db: AsyncSession, *, email: str, password: str) -> Session:
    user = await find_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise AuthenticationError("Invalid email or password")
    return Session(user=user, access_token=issue_token(user))


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user
