"""
Readlater Backend — Application Package Initializer
====================================================

What: The `readlater` package: API backend, client wrappers and screen view-models
      for the read-it-later service.
Who:  Imported by uvicorn (`readlater.main:create_app`), Alembic and pytest.

Architecture Note:

    ┌─────────────────────────────────────┐
    │     Routes / Resolvers (API Layer)  │  ← HTTP concerns, error mapping
    ├─────────────────────────────────────┤
    │      Services (Business Logic)      │  ← owner-scoped CRUD, upserts
    ├─────────────────────────────────────┤
    │  Repository (Authorized Transaction)│  ← one unit of work per call
    ├─────────────────────────────────────┤
    │     Models & Schemas (Data)         │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    `readlater.client` and `readlater.viewmodels` sit on the other side of the
    wire and only talk to the API through typed wrappers.
"""

__version__ = "1.0.0"
