"""
Catalog Router - public listings of classes, trainers and class schedules
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query

from backend.utils.errors import ValidationFailed
from backend.utils.responses import success_response
from models.gym import ClassOut, ScheduleOut, TrainerOut, dump
from routers.dependencies import get_catalog_service
from services.catalog_service import CatalogService
from utils.shared_utils import log_endpoint_event
from utils.time_utils import parse_day

catalog_router = APIRouter(prefix="/api", tags=["catalog"])


@catalog_router.get("/classes")
async def list_classes(catalog: CatalogService = Depends(get_catalog_service)):
    """List active classes"""
    classes = await catalog.list_classes()
    log_endpoint_event("/classes", None, "success", {"count": len(classes)})
    return success_response(data=dump(ClassOut, classes), message="Classes retrieved successfully")


@catalog_router.get("/classes/{class_id}")
async def get_class(class_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    """Fetch one class by id"""
    gym_class = await catalog.get_class(class_id)
    return success_response(data=dump(ClassOut, gym_class), message="Class retrieved successfully")


@catalog_router.get("/class-schedules")
async def list_schedules(
    date: Optional[str] = Query(default=None, description="YYYY-MM-DD, interpreted in APP_TIMEZONE"),
    catalog: CatalogService = Depends(get_catalog_service)
):
    """List class schedules ordered by start time, optionally for a single day"""
    day = None
    if date:
        try:
            day = parse_day(date)
        except ValueError as e:
            raise ValidationFailed(str(e), code="invalid_date")
    schedules = await catalog.list_schedules(day)
    log_endpoint_event("/class-schedules", None, "success", {"date": date, "count": len(schedules)})
    return success_response(data=dump(ScheduleOut, schedules), message="Schedules retrieved successfully")


@catalog_router.get("/class-schedules/{schedule_id}")
async def get_schedule(schedule_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    """Fetch one class schedule by id"""
    schedule = await catalog.get_schedule(schedule_id)
    return success_response(data=dump(ScheduleOut, schedule), message="Schedule retrieved successfully")


@catalog_router.get("/trainers")
async def list_trainers(catalog: CatalogService = Depends(get_catalog_service)):
    """List active trainers"""
    trainers = await catalog.list_trainers()
    log_endpoint_event("/trainers", None, "success", {"count": len(trainers)})
    return success_response(data=dump(TrainerOut, trainers), message="Trainers retrieved successfully")


@catalog_router.get("/trainers/{trainer_id}")
async def get_trainer(trainer_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    """Fetch one trainer by id"""
    trainer = await catalog.get_trainer(trainer_id)
    return success_response(data=dump(TrainerOut, trainer), message="Trainer retrieved successfully")
