from typing import Optional

from fastapi import APIRouter, Depends

from app.core.deps import get_optional_storage
from app.schemas.dashboard import EPCDashboardResult
from app.schemas.epc_project import OverallStatus, Priority
from app.services.dashboard import get_epc_dashboard_stats
from app.storage.base import Storage

router = APIRouter()


@router.get("/dashboard", response_model=EPCDashboardResult)
async def epc_dashboard(
    status: Optional[OverallStatus] = None,
    priority: Optional[Priority] = None,
    storage: Optional[Storage] = Depends(get_optional_storage),
):
    """EPC dashboard statistics; reports success=false instead of failing"""
    return await get_epc_dashboard_stats(storage, status=status, priority=priority)
