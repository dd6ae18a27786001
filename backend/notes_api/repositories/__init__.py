# Repositories package init
"""
Notes API — Repository Layer
==============================

What:  Data access objects sitting between routes (HTTP) and the database.
How:   Each repository wraps a request-scoped AsyncSession and raises typed
       exceptions from notes_api.exceptions instead of driver errors.

Repository Inventory:
    - NoteRepository: CRUD over the notes table
"""
