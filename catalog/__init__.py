"""
Catalog API Application Package

Backend for managing authors, books, reviews and sales.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy database connection and session management
- exceptions.py: Error taxonomy shared by services and routers
- main.py: FastAPI application factory and lifespan
- dependencies.py: Dependency injection functions
- models/: SQLAlchemy ORM models
- schemas/: Pydantic request/response schemas
- routers/: API route handlers
- services/: Health monitor, cache-aside coordinator, search mirror,
  aggregation engine
"""

__version__ = "0.1.0"
