"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.consultation_routes import router as consultation_router
from app.api.routes.registration_routes import router as registration_router
from app.api.routes.user_routes import router as user_router
from app.api.routes.partner_routes import router as partner_router
from app.api.routes.story_routes import router as story_router
from app.api.routes.course_routes import router as course_router
from app.api.routes.faq_routes import router as faq_router
from app.api.routes.site_stats_routes import router as site_stats_router
from app.api.routes.admin_routes import router as admin_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(consultation_router)
api_router.include_router(registration_router)
api_router.include_router(user_router)
api_router.include_router(partner_router)
api_router.include_router(story_router)
api_router.include_router(course_router)
api_router.include_router(faq_router)
api_router.include_router(site_stats_router)
api_router.include_router(admin_router)
