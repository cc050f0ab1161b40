"""
Readlater Backend — Middleware Package
========================================

Request → [Request ID] → [Access Log] → [CORS] → [GZip] → Route Handler

Request ID runs first so the access log line and any error body carry the
same correlation id.
"""
