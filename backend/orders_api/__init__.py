"""
Customer Orders API - Application Package
==========================================

What: REST interface over the `customer` and `orders` tables.
Who:  Imported by uvicorn (`uvicorn orders_api.main:app`), pytest, and the
      route/service modules below.

Layering:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← path/body validation, status codes
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← existence checks, mutations
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy tables + pydantic rules
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← async engine, per-request session
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
