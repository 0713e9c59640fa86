from typing import Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.models import Setting
from school_results.core.logger import logger
from school_results.services.counter import CounterService


class SettingService:
    @staticmethod
    async def get_setting(key: str, db: AsyncSession) -> Optional[str]:
        result = await db.execute(select(Setting).where(Setting.key == key))
        setting = result.scalars().first()
        return setting.value if setting else None

    @staticmethod
    async def set_setting(key: str, value: str, db: AsyncSession) -> Setting:
        """
        Create or overwrite a key-value setting.

        Raises:
            HTTPException: 500 - Database error
        """
        try:
            result = await db.execute(select(Setting).where(Setting.key == key))
            setting = result.scalars().first()

            if setting:
                setting.value = value
            else:
                setting_id = await CounterService.next_id("settings", db)
                setting = Setting(id=setting_id, key=key, value=value)
                db.add(setting)

            await db.commit()
            logger.info(f"[SETTINGS] {key} saved")
            return setting

        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"[SETTINGS] Database error while saving {key}: {str(e)}")
            raise HTTPException(
                status_code=500,
                detail="Failed to save setting"
            ) from e
