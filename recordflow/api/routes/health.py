"""Health check endpoint for load balancers"""
from fastapi import APIRouter
from recordflow.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "UP", "service": settings.SERVICE_NAME}


@router.get("/info")
async def info():
    """Service info endpoint"""
    from recordflow import __version__
    return {
        "service": settings.SERVICE_NAME,
        "version": __version__,
        "description": "Recorded browser scripts to page objects, locators and steps",
        "recognition": {
            "modules": settings.VOCABULARY.module_keywords,
            "windows": {
                "login": settings.TUNING.login_window,
                "modal": settings.TUNING.modal_window,
                "search": settings.TUNING.search_window
            },
            "maxAlternatives": settings.TUNING.max_alternatives
        }
    }
