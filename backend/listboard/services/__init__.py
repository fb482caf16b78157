# Services package init
"""
ListBoard Backend: Services Layer
====================================

What:  Business logic between routes (HTTP) and the two storage backends.

Service Inventory:
    - ListService: filter building, pagination, create/update/delete against
      the document store, and the relational dump
"""
