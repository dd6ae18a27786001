# Routes package init
"""
Notes API — API Routes Package
================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - notes.py:   GET/POST        /api/notes
                  GET/PATCH/DELETE /api/notes/{id}
    - health.py:  GET /health, GET /api/healthchecker

Routes stay THIN: extract input, call the repository, shape the response.
Error responses come from the global exception handlers in main.py.
"""
