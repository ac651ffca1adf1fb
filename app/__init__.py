"""
TalentConnect API
Backend for the CareerCraft recruitment and training site.

Architecture:
- PostgreSQL: bookings, registrations, site content, admin accounts
- Artifact storage: CVs and images embedded, on local disk, or in S3-compatible storage
- SMTP (fastapi-mail): booking and registration emails
"""

__version__ = "1.0.0"
