"""
Admin Router - dashboard statistics and catalogue provisioning (admin only)
"""
from fastapi import APIRouter, Depends

from auth import require_admin
from backend.utils.responses import success_response
from models.gym import (
    ClassCreateRequest,
    ClassOut,
    ClassUpdateRequest,
    ScheduleCreateRequest,
    ScheduleOut,
    ScheduleUpdateRequest,
    TrainerCreateRequest,
    TrainerOut,
    TrainerUpdateRequest,
    dump,
)
from routers.dependencies import get_analytics_service, get_catalog_service
from services.analytics_service import AnalyticsService
from services.catalog_service import CatalogService
from utils.shared_utils import log_endpoint_event

admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


@admin_router.get("/stats")
async def get_admin_stats(
    current_user: dict = Depends(require_admin),
    analytics: AnalyticsService = Depends(get_analytics_service)
):
    """Booking counts and completed revenue"""
    stats = await analytics.get_dashboard_stats()
    stats["revenue"]["total"] = str(stats["revenue"]["total"])
    log_endpoint_event("/admin/stats", current_user["user_id"], "success", {
        "bookings": stats["bookings"]["total"]
    })
    return success_response(data=stats, message="Stats retrieved successfully")


@admin_router.post("/trainers")
async def create_trainer(
    request: TrainerCreateRequest,
    current_user: dict = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service)
):
    trainer = await catalog.create_trainer(request.model_dump())
    log_endpoint_event("/admin/trainers", current_user["user_id"], "success", {"trainer_id": trainer.id})
    return success_response(data=dump(TrainerOut, trainer), message="Trainer created", status=201)


@admin_router.patch("/trainers/{trainer_id}")
async def update_trainer(
    trainer_id: str,
    request: TrainerUpdateRequest,
    current_user: dict = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service)
):
    trainer = await catalog.update_trainer(trainer_id, request.model_dump(exclude_unset=True, exclude_none=True))
    return success_response(data=dump(TrainerOut, trainer), message="Trainer updated")


@admin_router.post("/classes")
async def create_class(
    request: ClassCreateRequest,
    current_user: dict = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service)
):
    gym_class = await catalog.create_class(request.model_dump())
    log_endpoint_event("/admin/classes", current_user["user_id"], "success", {"class_id": gym_class.id})
    return success_response(data=dump(ClassOut, gym_class), message="Class created", status=201)


@admin_router.patch("/classes/{class_id}")
async def update_class(
    class_id: str,
    request: ClassUpdateRequest,
    current_user: dict = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service)
):
    gym_class = await catalog.update_class(class_id, request.model_dump(exclude_unset=True, exclude_none=True))
    return success_response(data=dump(ClassOut, gym_class), message="Class updated")


@admin_router.post("/class-schedules")
async def create_schedule(
    request: ScheduleCreateRequest,
    current_user: dict = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service)
):
    schedule = await catalog.create_schedule(request.model_dump())
    log_endpoint_event("/admin/class-schedules", current_user["user_id"], "success", {"schedule_id": schedule.id})
    return success_response(data=dump(ScheduleOut, schedule), message="Schedule created", status=201)


@admin_router.patch("/class-schedules/{schedule_id}")
async def update_schedule(
    schedule_id: str,
    request: ScheduleUpdateRequest,
    current_user: dict = Depends(require_admin),
    catalog: CatalogService = Depends(get_catalog_service)
):
    schedule = await catalog.update_schedule(schedule_id, request.model_dump(exclude_unset=True, exclude_none=True))
    return success_response(data=dump(ScheduleOut, schedule), message="Schedule updated")
