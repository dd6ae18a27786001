"""
Notes API — Application Package Initializer
=============================================

What: Marks the `notes_api` directory as a Python package.
Who:  Used implicitly by Python's import system and explicitly by pytest and uvicorn.

Architecture Note:
    ┌─────────────────────────────────────┐
    │          Routes (API Layer)         │  ← HTTP parsing and response shaping
    ├─────────────────────────────────────┤
    │       Repositories (Data Access)    │  ← CRUD intents → SQL, typed failures
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async engine, pool, sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
