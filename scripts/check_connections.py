#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the database, storage and mail settings before deploying.
Usage: python scripts/check_connections.py
"""
import sys
sys.path.insert(0, '.')

from sqlalchemy.engine import make_url

from app.core.config import get_settings
from app.db.database import init_schema, test_db_connection
from app.services.storage import get_artifact_gateway


def main():
    settings = get_settings()
    print("=" * 50)
    print("TALENTCONNECT - CONNECTION CHECK")
    print("=" * 50)

    # Database
    print("\n[1] Testing database...")
    print(f"    URL: {make_url(settings.database_url).render_as_string(hide_password=True)}")
    if test_db_connection():
        print("    ✅ Database: CONNECTED")
        init_schema()
        print("    ✅ Schema: READY")
    else:
        print("    ❌ Database: FAILED")

    # Storage
    print("\n[2] Storage...")
    storage = settings.storage
    gateway = get_artifact_gateway()
    for category in ("registrations", "partners", "success_stories"):
        print(f"    {category}: {gateway.backend_kind(category).value}")
    if storage.remote_enabled and not storage.has_remote_credentials:
        print("    ⚠️  REMOTE_STORAGE_ENABLED is set but S3 credentials are incomplete")

    # Mail
    print("\n[3] Mail...")
    if settings.mail_enabled and settings.mail_username and settings.mail_password:
        print(f"    SMTP: {settings.mail_server}:{settings.mail_port} as {settings.mail_username}")
    else:
        print("    ⚠️  Mail disabled (notification sends fail and are logged)")
    if not settings.admin_email:
        print("    ⚠️  ADMIN_EMAIL not set, admin booking notices will fail")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
