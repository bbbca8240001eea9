"""
Udyoga Mitra
Part-time job marketplace for students and employers.

Architecture:
- PostgreSQL: accounts, profiles, skill catalog, jobs, requests, messages
- FastAPI: JSON API with JWT sessions
- Matching: skill-overlap filter over active jobs
"""

__version__ = "1.0.0"
