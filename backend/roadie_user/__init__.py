"""
Roadie User Service — Package Initializer
==========================================

What: CRUD request handler for the `users` resource.
Who:  Imported by the Lambda entry point (`roadie_user.handler`), by uvicorn
      (`roadie_user.main:app`) and by pytest.

Architecture Note:

    ┌─────────────────────────────────────┐
    │  Hosts: Lambda handler / FastAPI    │  ← event envelope, HTTP plumbing
    ├─────────────────────────────────────┤
    │  Dispatcher (services/dispatcher)   │  ← method → operation → status
    ├─────────────────────────────────────┤
    │  Store (services/*_store)           │  ← find / insert / replace / remove
    ├─────────────────────────────────────┤
    │  Models & Schemas                   │  ← SQLAlchemy row + pydantic record
    └─────────────────────────────────────┘

    The dispatcher never imports a host or a concrete store: both are
    handed to it per invocation.
"""

__version__ = "1.0.0"
