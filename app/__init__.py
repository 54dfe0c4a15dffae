"""
Placement Portal
Backend connecting students, recruiters and training & placement officers.

Architecture:
- MongoDB: users, colleges, jobs, applications, resumes, notifications, activity logs
- FastAPI: REST API under /api with JWT (Bearer header or cookie) auth
- Local disk: uploaded resumes, avatars and marksheets served from /uploads
"""

__version__ = "1.0.0"
