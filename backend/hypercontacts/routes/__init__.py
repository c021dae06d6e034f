"""
Hypercontacts — Routes Package
===============================

Route Inventory:
    - contacts.py:  HTML pages, row fragments, count and email probes
    - api.py:       JSON API under /api/v1
    - health.py:    GET /health (service health check)

Design Principle:
    Routes are THIN: extract request data, call ContactService, pick the
    response shape. Queries live in services/contact_service.py.
"""
