"""
Table definitions.

Schema is declared with SQLAlchemy Core so the same DDL runs on PostgreSQL
(production) and SQLite (tests). Queries elsewhere stay as raw text() SQL.
"""

from sqlalchemy import (
    MetaData, Table, Column, Integer, String, Text, Date, DateTime,
    LargeBinary, ForeignKey, Index, func, text,
)

metadata = MetaData()


artifacts = Table(
    "artifacts", metadata,
    Column("id", Integer, primary_key=True),
    Column("category", String(50), nullable=False),
    # embedded | local | remote; exactly one of data/path/url is set to match
    Column("kind", String(20), nullable=False),
    Column("original_name", String(255), nullable=False),
    Column("mime_type", String(100), nullable=False),
    Column("data", LargeBinary),
    Column("path", String(500)),
    Column("url", String(1000)),
    Column("provider_id", String(500)),
    Column("created_at", DateTime, server_default=func.now()),
)

consultations = Table(
    "consultations", metadata,
    Column("id", Integer, primary_key=True),
    Column("full_name", String(100), nullable=False),
    Column("email", String(255), nullable=False),
    Column("phone", String(10), nullable=False),
    Column("meeting_date", Date, nullable=False),
    Column("meeting_time", String(20), nullable=False),
    Column("status", String(20), nullable=False, server_default="pending"),
    Column("created_at", DateTime, server_default=func.now()),
    Column("updated_at", DateTime, server_default=func.now()),
)

# At most one non-cancelled booking per slot
Index(
    "uq_consultations_active_slot",
    consultations.c.meeting_date,
    consultations.c.meeting_time,
    unique=True,
    postgresql_where=text("status <> 'cancelled'"),
    sqlite_where=text("status <> 'cancelled'"),
)

registrations = Table(
    "registrations", metadata,
    Column("id", Integer, primary_key=True),
    Column("full_name", String(100), nullable=False),
    Column("email", String(255), nullable=False, unique=True),
    Column("phone", String(20)),
    Column("roles", String(255)),
    Column("cv_artifact_id", Integer, ForeignKey("artifacts.id")),
    Column("created_at", DateTime, server_default=func.now()),
)

partners = Table(
    "partners", metadata,
    Column("id", Integer, primary_key=True),
    Column("name", String(200), nullable=False),
    Column("logo_artifact_id", Integer, ForeignKey("artifacts.id")),
    Column("created_at", DateTime, server_default=func.now()),
)

success_stories = Table(
    "success_stories", metadata,
    Column("id", Integer, primary_key=True),
    Column("quote", Text, nullable=False),
    Column("name", String(100), nullable=False),
    Column("role", String(100)),
    Column("company", String(200)),
    Column("rating", Integer),
    Column("image_artifact_id", Integer, ForeignKey("artifacts.id")),
    Column("created_at", DateTime, server_default=func.now()),
)

courses = Table(
    "courses", metadata,
    Column("id", Integer, primary_key=True),
    Column("icon", String(100)),
    Column("title", String(200), nullable=False),
    Column("description", Text),
    Column("full_description", Text),
    Column("duration", String(50)),
    Column("level", String(50)),
    Column("features", Text),
)

faqs = Table(
    "faqs", metadata,
    Column("id", Integer, primary_key=True),
    Column("question", Text, nullable=False),
    Column("answer", Text, nullable=False),
)

site_stats = Table(
    "site_stats", metadata,
    Column("id", Integer, primary_key=True),
    Column("program_duration", String(50)),
    Column("course_tracks", String(50)),
    Column("placement_rate", String(50)),
    Column("industry_mentors", String(50)),
    Column("min_stipend", String(50)),
    Column("max_stipend", String(50)),
    Column("alumni_network", String(50)),
    Column("partner_companies", String(50)),
    Column("average_rating", String(50)),
)

admins = Table(
    "admins", metadata,
    Column("id", Integer, primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("password", String(255), nullable=False),
    Column("created_at", DateTime, server_default=func.now()),
)
