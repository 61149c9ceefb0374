"""
Service layer.

Each service wraps one AsyncSession and holds the business rules for one
concern (identity, derivation, catalog, redirects, ranking, ownership),
keeping them out of the API endpoints and the database models.
"""
