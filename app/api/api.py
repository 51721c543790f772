from fastapi import APIRouter
from app.api.routes.bundles import router as bundles_router
from app.api.routes.bookings import router as bookings_router

api_router = APIRouter(prefix="/api")
# bundles first: GET /bookings/bundle-orders must win over GET /bookings/{booking_reference}
api_router.include_router(bundles_router)
api_router.include_router(bookings_router)
