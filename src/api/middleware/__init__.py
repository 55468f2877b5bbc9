"""FastAPI middleware package for cross-cutting request/response concerns.

Middleware are executed in this order, outermost first:
1. Request context (sets up correlation IDs)
2. Request logging (one access line per request)
3. Recovery (unhandled exceptions become a 500 envelope)
4. CORS (answers preflight requests)
5. Security headers
6. Rate limit

Exception handlers registered by ``error_handler`` render application
errors before they reach the recovery layer.
"""
