# Routes package init
"""
TechNotes Backend - API Routes Package
=======================================

Route Inventory:
    - notes.py:   GET/POST/PATCH/DELETE /notes
    - users.py:   GET/POST/PATCH/DELETE /users
    - health.py:  GET /health

Routes are THIN: they unpack the request body, call a service, and return
its result. Business rules live in app.services.
"""
