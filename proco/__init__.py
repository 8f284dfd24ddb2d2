"""
Backend package for the Proco marketing site.

This package provides a FastAPI application serving portfolio projects,
the course catalog and customer inquiries, backed by MongoDB with an
in-memory fallback so the site keeps working when the database is down.
"""
