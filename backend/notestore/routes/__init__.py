"""
NoteStore Backend - API Routes Package
========================================

Route Inventory:
    - notes.py:  GET /notes, GET|PUT|DELETE /notes/{name}, POST /write
    - form.py:   GET /UploadForm.html
    - health.py: GET /health

Routes stay thin: collect request data, call NoteStore, shape the response.
"""
