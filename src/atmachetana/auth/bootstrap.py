"""
Default admin bootstrap, run once at startup.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from atmachetana.config import Settings
from atmachetana.core.enums import Role
from atmachetana.core.models import Staff
from atmachetana.core.security import get_password_hash

logger = logging.getLogger(__name__)


async def ensure_default_admin(db: AsyncSession, settings: Settings) -> bool:
    """Create the configured admin when the staff table is empty.

    Check-then-insert is not atomic: two processes starting at the same time
    can both insert. Startup-only, so this is tolerated.

    Returns:
        True if an admin was created
    """
    existing = await db.scalar(select(func.count()).select_from(Staff))
    if existing:
        logger.debug(f"Staff table has {existing} row(s); skipping admin bootstrap")
        return False

    admin = Staff(
        name=settings.ADMIN_NAME,
        email=settings.ADMIN_EMAIL,
        hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
        role=Role.ADMIN.value,
        is_active=True,
    )
    db.add(admin)
    await db.commit()
    logger.info(f"Default admin created: {settings.ADMIN_EMAIL}")
    return True
