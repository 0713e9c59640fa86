from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_results.api.schemas.setting import SettingSaved, SettingUpdate, SettingValue
from school_results.core.database import get_db
from school_results.services.setting import SettingService
from school_results.utils.roles import get_current_admin

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/{key}", response_model=SettingValue, status_code=status.HTTP_200_OK)
async def get_setting(
        key: str = Path(..., min_length=1),
        db: AsyncSession = Depends(get_db),
):
    value = await SettingService.get_setting(key, db)
    return SettingValue(value=value or "")


@router.post("", response_model=SettingSaved, status_code=status.HTTP_200_OK)
async def save_setting(
        setting_data: SettingUpdate,
        db: AsyncSession = Depends(get_db),
        current_admin=Depends(get_current_admin),
):
    await SettingService.set_setting(setting_data.key, setting_data.value, db)
    return SettingSaved(success=True)
