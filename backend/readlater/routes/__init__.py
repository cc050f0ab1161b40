"""
Readlater Backend — API Routes Package
========================================

Route Inventory:
    - following.py:      POST /svc/following/save   (internal push, token)
    - links.py:          POST /api/links/archive
    - rules.py:          /api/rules
    - device_tokens.py:  /api/device-tokens
    - health.py:         GET  /health

Routes stay thin: parse the request, call a service or resolver, shape the
response. Owner scoping and transactions live in the services.
"""
