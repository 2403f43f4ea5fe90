"""
Invitation Code Generator

Issues the short, human-typeable code a project is joined with. Uniqueness
is decided by the store: each draw is claimed with an insert keyed on the
code itself, and a duplicate key means someone else holds it, so we draw
again. There is no check-then-insert window.
"""

import logging
import secrets

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from app.core.config import settings
from app.core.constants import INVITATION_CODE_ALPHABET
from app.core.exceptions import GenerationExhausted
from app.core.metrics import (
    invitation_code_collisions_total,
    invitation_code_exhausted_total,
)
from app.repositories.invitation_codes import InvitationCodeRepository

logger = logging.getLogger(__name__)


def draw_code(length: int = None) -> str:
    """Draw a random code from [A-Z0-9] using the OS CSPRNG."""
    length = length or settings.INVITATION_CODE_LENGTH
    return "".join(secrets.choice(INVITATION_CODE_ALPHABET) for _ in range(length))


def normalize_code(code: str) -> str:
    """Codes are case-insensitive for humans; stored upper-case."""
    return code.strip().upper()


class InvitationCodeGenerator:
    """
    Usage:
        generator = InvitationCodeGenerator(db)
        code = await generator.generate(project_id)
    """

    def __init__(self, db: AsyncIOMotorDatabase, max_attempts: int = None):
        self.repo = InvitationCodeRepository(db)
        self.max_attempts = (
            max_attempts if max_attempts is not None else settings.INVITATION_CODE_MAX_ATTEMPTS
        )

    async def generate(self, project_id: str) -> str:
        """
        Draw and claim a unique code for ``project_id``.

        Raises:
            GenerationExhausted: if every attempt collided with an issued code.
        """
        for attempt in range(1, self.max_attempts + 1):
            code = draw_code()
            try:
                await self.repo.claim(code, project_id)
            except DuplicateKeyError:
                invitation_code_collisions_total.inc()
                logger.warning(
                    f"Invitation code collision for project {project_id} "
                    f"(attempt {attempt}/{self.max_attempts})"
                )
                continue
            return code

        invitation_code_exhausted_total.inc()
        logger.error(
            f"Could not generate a unique invitation code for project {project_id} "
            f"after {self.max_attempts} attempts"
        )
        raise GenerationExhausted(self.max_attempts)

    async def release(self, code: str) -> None:
        await self.repo.release(code)
