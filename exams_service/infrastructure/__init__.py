"""Infrastructure layer for external systems.

- **database**: The single guarded PostgreSQL connection and repositories
- **auth**: Client for the identity service and its error translation
"""
