"""
Booking Router - class bookings and personal training sessions
"""
from fastapi import APIRouter, Depends

from auth import get_current_user
from backend.utils.responses import success_response
from models.gym import (
    BookingCreateRequest,
    BookingOut,
    PersonalTrainingCreateRequest,
    PersonalTrainingOut,
    PersonalTrainingStatusRequest,
    dump,
)
from routers.dependencies import get_booking_service
from services.booking_service import BookingService
from utils.shared_utils import log_endpoint_event

booking_router = APIRouter(prefix="/api", tags=["bookings"])


@booking_router.get("/bookings")
async def list_bookings(
    current_user: dict = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service)
):
    """List the caller's class bookings, newest first"""
    rows = await bookings.list_user_bookings(current_user["user_id"])
    return success_response(data=dump(BookingOut, rows), message="Bookings retrieved successfully")


@booking_router.post("/bookings")
async def create_booking(
    request: BookingCreateRequest,
    current_user: dict = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service)
):
    """Book the caller onto a class schedule"""
    booking = await bookings.create_class_booking(
        user_id=current_user["user_id"],
        schedule_id=request.class_schedule_id,
        payment_id=request.payment_id
    )
    log_endpoint_event("/bookings", current_user["user_id"], "success", {
        "booking_id": booking.id,
        "schedule_id": booking.class_schedule_id,
    })
    return success_response(data=dump(BookingOut, booking), message="Booking created", status=201)


@booking_router.patch("/bookings/{booking_id}/cancel")
async def cancel_booking(
    booking_id: str,
    current_user: dict = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service)
):
    """Cancel a booking and release its spot"""
    booking = await bookings.cancel_class_booking(
        booking_id,
        user_id=current_user["user_id"],
        role=current_user.get("role")
    )
    log_endpoint_event("/bookings/{id}/cancel", current_user["user_id"], "success", {"booking_id": booking_id})
    return success_response(data=dump(BookingOut, booking), message="Booking cancelled successfully")


@booking_router.get("/personal-training")
async def list_personal_training(
    current_user: dict = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service)
):
    """Trainers get the sessions they teach, members the sessions they booked"""
    sessions = await bookings.list_personal_training_sessions(current_user["user_id"])
    return success_response(data=dump(PersonalTrainingOut, sessions), message="Sessions retrieved successfully")


@booking_router.post("/personal-training")
async def create_personal_training(
    request: PersonalTrainingCreateRequest,
    current_user: dict = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service)
):
    """Request a one-on-one session with a trainer"""
    session = await bookings.create_personal_training_session(
        trainer_id=request.trainer_id,
        student_id=current_user["user_id"],
        start_time=request.start_time,
        end_time=request.end_time,
        price=request.price,
        notes=request.notes
    )
    log_endpoint_event("/personal-training", current_user["user_id"], "success", {"session_id": session.id})
    return success_response(data=dump(PersonalTrainingOut, session), message="Session requested", status=201)


@booking_router.patch("/personal-training/{session_id}/status")
async def update_personal_training_status(
    session_id: str,
    request: PersonalTrainingStatusRequest,
    current_user: dict = Depends(get_current_user),
    bookings: BookingService = Depends(get_booking_service)
):
    """Confirm, complete or cancel a personal training session"""
    session = await bookings.update_personal_training_status(
        session_id,
        request.status,
        user_id=current_user["user_id"],
        role=current_user.get("role")
    )
    log_endpoint_event("/personal-training/{id}/status", current_user["user_id"], "success", {
        "session_id": session_id,
        "status": request.status,
    })
    return success_response(data=dump(PersonalTrainingOut, session), message="Session updated")
