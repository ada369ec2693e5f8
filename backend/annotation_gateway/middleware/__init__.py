"""
Annotation Gateway - Middleware Package
=========================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Responses travel back through the same chain in reverse, so the
    logging middleware sees the final status code and the request ID is
    added to the response headers last.
"""
