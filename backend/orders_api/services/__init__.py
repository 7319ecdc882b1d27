"""
Customer Orders API - Services Layer
=====================================

Service Inventory:
    - CustomerService: customer reads and the customer existence check
    - OrderService:    order reads, create/replace/patch/delete with
                       existence checks

Services are stateless singletons. Each call receives the request's
AsyncSession, raises application exceptions (NotFoundError,
ValidationError, DatabaseError), and never builds HTTP responses.
"""
