# Services package init
"""
TechNotes Backend - Services Layer
===================================

What:  Business logic layer sitting between routes (HTTP) and database (persistence).

Service Inventory:
    - NoteService: note CRUD, owner cross-checks, ticket assignment
    - UserService: user CRUD, password hashing, delete-with-notes guard
    - CounterService: persisted, atomically incremented sequences
    - validation: shared blank/id/roles predicates

Services receive the request's AsyncSession as an argument and never commit;
the session dependency commits or rolls back once per request.
"""
