# Middleware package init
"""
Album API — Middleware Package
===============================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → Route Handler

    The request ID is set before the access line is written, so every log
    entry for a request carries the same correlation ID.
"""
