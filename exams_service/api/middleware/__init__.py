"""FastAPI middleware and the fault normalizer.

- **RequestContextMiddleware**: assigns a correlation ID to every request
- **RequestLoggingMiddleware**: logs method, path, status and timing
- **error_handler**: turns every unhandled failure into an ``{"Err": kind}``
  envelope

Middleware run in reverse order of registration: request context is added
last so the correlation ID is bound before the request is logged.
"""
