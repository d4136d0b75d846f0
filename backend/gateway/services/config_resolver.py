"""
Resolves a user's object storage credentials from the preference store.

Fails closed: any problem (no row, no storage section, disabled, blank
field, unreadable store) yields None instead of an exception, and the caller
turns that into a ConfigError.
"""
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from gateway.models.user_preference import UserPreference
from gateway.schemas.storage_config import StorageConfig

logger = logging.getLogger(__name__)


class ConfigResolver:
    """Loads and validates StorageConfig per request. Holds no state."""

    async def load_preferences(self, db: AsyncSession, user_id: str) -> Optional[dict]:
        """Raw preferences document for the user, or None."""
        result = await db.execute(
            select(UserPreference.preferences).where(UserPreference.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def resolve(self, db: AsyncSession, user_id: str) -> Optional[StorageConfig]:
        """
        Build the user's StorageConfig.

        Args:
            db: Database session
            user_id: Authenticated user's ID

        Returns:
            Enabled, complete StorageConfig, or None
        """
        logger.debug(f"Fetching storage config for user: {user_id}")

        try:
            preferences = await self.load_preferences(db, user_id)
        except SQLAlchemyError as e:
            logger.error(f"Could not read preferences for user {user_id}: {e}")
            return None

        if preferences is None:
            logger.warning(f"No preferences found for user {user_id}")
            return None

        try:
            config = StorageConfig.from_preferences(preferences)
        except (PydanticValidationError, ValueError) as e:
            logger.warning(f"Invalid storage config for user {user_id}: {e}")
            return None

        if not config.enabled:
            logger.warning(f"Storage config is disabled for user {user_id}")
            return None

        logger.info(f"Storage config loaded for user {user_id}", extra={"bucket": config.bucket_name})
        return config


def get_config_resolver() -> ConfigResolver:
    """FastAPI dependency; override in tests to substitute a fake resolver."""
    return ConfigResolver()
