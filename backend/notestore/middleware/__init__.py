"""
NoteStore Backend - Middleware Package
========================================

Middleware Chain (order matters):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    Rate Limit is only installed when NOTESTORE_RATE_LIMIT_REQUESTS > 0.
"""
