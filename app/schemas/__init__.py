"""
Schemas module - Request/Response schemas for API endpoints.

Difference from the table definitions in app.db.tables:
- Tables: what is stored
- Schemas: API contract (what client sends/receives)
"""
