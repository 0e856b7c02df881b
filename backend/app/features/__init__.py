"""
Feature modules for Run Coach Relay.

Each feature is a self-contained module with:
- models.py - SQLAlchemy models
- schemas.py - Pydantic schemas
- repository.py - Data access (optional)
- service modules - Business logic
"""
