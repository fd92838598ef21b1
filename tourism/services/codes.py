"""Human-readable reservation codes"""

import random
from datetime import datetime
from typing import Optional

from sqlalchemy import select, exists
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from tourism.config import settings
from tourism.models.reservation import Reservation
from tourism.services.errors import CodeGenerationExhausted

logger = structlog.get_logger()

_random = random.SystemRandom()


def format_code(prefix: str, when: datetime, suffix: int) -> str:
    """Build ``{PREFIX}{yyyyMMdd}{NNNN}``"""
    return f"{prefix.upper()}{when.strftime('%Y%m%d')}{suffix:04d}"


async def code_exists(db: AsyncSession, code: str) -> bool:
    result = await db.execute(select(exists().where(Reservation.reservation_code == code)))
    return bool(result.scalar())


async def generate_unique_code(
    db: AsyncSession,
    prefix: Optional[str] = None,
    *,
    max_attempts: Optional[int] = None,
    now: Optional[datetime] = None,
) -> str:
    """Return a reservation code not yet present in the database.

    The four digit suffix is re-rolled on collision, up to ``max_attempts``
    times.
    """
    prefix = prefix or settings.reservation_code_prefix
    max_attempts = max_attempts or settings.code_generation_max_attempts
    now = now or datetime.now()

    for attempt in range(1, max_attempts + 1):
        code = format_code(prefix, now, _random.randint(1000, 9999))
        if not await code_exists(db, code):
            return code
        logger.debug("Reservation code collision", code=code, attempt=attempt)

    logger.error("Reservation code generation exhausted", prefix=prefix, attempts=max_attempts)
    raise CodeGenerationExhausted(
        f"Could not generate a unique reservation code after {max_attempts} attempts"
    )
