"""
Customer Orders API - Routes Package
=====================================

Route Inventory:
    - customers.py: GET /customers, GET /customers/{id}
    - orders.py:    GET/POST /customers/{id}/orders,
                    GET/PUT/PATCH/DELETE /customers/{id}/orders/{order_num}
    - health.py:    GET /health

Routes stay thin: they declare path rules and body models, call a service,
and pick the status code. Business decisions live in the services.
"""
