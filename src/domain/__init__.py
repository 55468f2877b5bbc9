"""Domain layer: users and tasks.

Each aggregate package holds its ORM model, its repository (the store), the
Pydantic shapes it returns, and the service that applies the business rules.
Services receive the authenticated user id from the API layer and pass it
into every store predicate.
"""
