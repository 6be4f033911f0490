# emergicare/router/routers.py

from fastapi import FastAPI
from emergicare.modules.profiles.profiles_controller import router as profiles_router
from emergicare.modules.doctors.doctors_controller import router as doctors_router
from emergicare.modules.consultations.consultations_controller import router as consultations_router
from emergicare.modules.health.health_controller import router as health_router
from emergicare.common.realtime.realtime_controller import router as realtime_router

def include_routers(app: FastAPI) -> None:
    """Include all API routers in the FastAPI application."""
    app.include_router(profiles_router)
    app.include_router(doctors_router)
    app.include_router(consultations_router)
    app.include_router(health_router)
    app.include_router(realtime_router)
