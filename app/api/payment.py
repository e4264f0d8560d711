# app/api/payment.py

from fastapi import APIRouter, Depends, Request

from app.core.config import settings
from app.core.logger import logger
from app.core.responses import ok
from app.core.security import AuthContext, require_role
from app.crud.booking_lock import DoctorBookingLock
from app.db.client import get_db
from app.models.appointment import AppointmentOut, CreateOrderRequest, CreateOrderResponse, VerifyPaymentRequest
from app.services.booking_service import BookingService

router = APIRouter(
    prefix="/api/payment",
    tags=["Payment"]
)


def get_booking_service(request: Request, db=Depends(get_db)) -> BookingService:
    """Dependency to get booking service with database and payment gateway"""
    lock = DoctorBookingLock(
        db,
        ttl_seconds=settings.BOOKING_LOCK_TTL_SECONDS,
        wait_seconds=settings.BOOKING_LOCK_WAIT_SECONDS,
    )
    return BookingService(
        db,
        gateway=request.app.state.payment_gateway,
        lock=lock,
        symptoms_limit=settings.SYMPTOMS_METADATA_LIMIT,
    )


@router.post("/create-order")
def create_order(
        order: CreateOrderRequest,
        auth: AuthContext = Depends(require_role("patient")),
        booking_service: BookingService = Depends(get_booking_service)
):
    """Create a PaymentIntent for a slot; the appointment is only written after payment"""
    logger.info(f"Create order for doctor {order.doctorId} by patient {auth.id}")
    result = booking_service.create_booking_intent(order, auth.id)
    return ok(CreateOrderResponse(**result).model_dump(), "Payment intent created successfully")


@router.post("/verify-payment")
def verify_payment(
        body: VerifyPaymentRequest,
        auth: AuthContext = Depends(require_role("patient")),
        booking_service: BookingService = Depends(get_booking_service)
):
    """Confirm a succeeded PaymentIntent and turn it into an appointment"""
    appointment = booking_service.finalize_booking(body.paymentIntentId, auth.id)
    return ok(
        AppointmentOut(**appointment).model_dump(),
        "Payment verified and appointment confirmed successfully"
    )
