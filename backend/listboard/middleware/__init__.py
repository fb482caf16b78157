# Middleware package init
"""
ListBoard Backend: Middleware Package
========================================

Middleware Chain (request order):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    - Request ID first, so every later log line can carry the id
    - Logging measures the full handler time and sees the final status
"""
