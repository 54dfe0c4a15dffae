"""
Schemas module - Request schemas for API endpoints.

Every pydantic model lives in app/schemas/schemas.py:
- Auth (role-tagged register payloads, login, password change)
- Users, jobs, applications, resumes
- Pagination
"""
