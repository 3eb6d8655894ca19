# Middleware package init
"""
Roadie User Service — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request of the FastAPI host.

Middleware Chain:
    Request → [Request ID] → [Logging] → Route Handler

    Request ID runs first so the access log line carries the id. The Lambda
    handler sets the same request id ContextVar from the event itself.
"""
