"""
ListBoard Backend: Application Package Initializer
====================================================

What: Marks the `listboard` directory as a Python package.
Who:  Imported by uvicorn (`listboard.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← filters, pagination, merges
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │  Document store  │  Relational store│  ← PyMongo async / SQLAlchemy
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
