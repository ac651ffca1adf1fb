"""
Site Stats Routes

GET /site-stats - Latest stats merged over the built-in defaults
POST /site-stats - Insert or update the single stats row
"""

import logging
from fastapi import APIRouter
from sqlalchemy import text

from app.core.errors import PersistenceError
from app.db.database import get_db_session, execute_raw_sql
from app.schemas.schemas import SiteStatsUpdate, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/site-stats", tags=["Site Stats"])

# Shown for anything the database doesn't have
DEFAULT_STATS = {
    "program_duration": "3 Months",
    "course_tracks": "8+",
    "placement_rate": "100%",
    "industry_mentors": "50+",
    "min_stipend": "₹15K",
    "max_stipend": "₹35K",
    "alumni_network": "500+",
    "partner_companies": "500+",
    "average_rating": "4.9/5",
    "avg_package": "₹12.5L",
    "highest_package": "₹45L",
    "success_rate": "95%",
    "hands_on_projects": "25+",
    "job_placement_guarantee": "100%",
    "active_alumni_network": "500+",
    "internship_placement": "100%",
    "convert_to_full_time": "85%",
    "avg_job_placement_time": "2 Weeks",
    "average_starting_salary": "₹8.5L",
    "internship_stipend": "₹15k-35k",
}

# Columns that exist in the site_stats table
STATS_COLUMNS = [
    "program_duration", "course_tracks", "placement_rate", "industry_mentors",
    "min_stipend", "max_stipend", "alumni_network", "partner_companies", "average_rating",
]


@router.get("")
async def get_site_stats():
    """Database values take precedence; defaults fill the rest (or everything if the DB is down)."""
    try:
        rows = execute_raw_sql("SELECT * FROM site_stats ORDER BY id DESC LIMIT 1")
    except PersistenceError:
        logger.warning("Site stats query failed, serving defaults")
        return dict(DEFAULT_STATS)

    db_stats = {k: v for k, v in rows[0].items() if v is not None} if rows else {}
    return {**DEFAULT_STATS, **db_stats}


@router.post("", response_model=MessageResponse)
async def save_site_stats(stats: SiteStatsUpdate):
    values = {col: getattr(stats, col) or DEFAULT_STATS[col] for col in STATS_COLUMNS}

    with get_db_session() as db:
        row = db.execute(text("SELECT id FROM site_stats ORDER BY id DESC LIMIT 1")).fetchone()
        if row:
            assignments = ", ".join(f"{col} = :{col}" for col in STATS_COLUMNS)
            db.execute(text(f"UPDATE site_stats SET {assignments} WHERE id = :id"), {**values, "id": row[0]})
            return MessageResponse(message="Site stats updated successfully!", id=row[0])

        columns = ", ".join(STATS_COLUMNS)
        placeholders = ", ".join(f":{col}" for col in STATS_COLUMNS)
        result = db.execute(
            text(f"INSERT INTO site_stats ({columns}) VALUES ({placeholders}) RETURNING id"),
            values
        )
        stats_id = result.fetchone()[0]

    return MessageResponse(message="Site stats saved successfully!", id=stats_id)
