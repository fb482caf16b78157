# Routes package init
"""
ListBoard Backend: API Routes Package
========================================

Route Inventory:
    - lists.py:   the list resource under settings.list_prefix
                  GET /, GET /pagination/{page}/{row}, GET /relational,
                  POST /, PUT /{id}, DELETE /{id}
    - health.py:  GET /health (storage connectivity)

Routes stay thin: they read the request, call list_service and return
its result. Business rules live in services/list_service.py.
"""
