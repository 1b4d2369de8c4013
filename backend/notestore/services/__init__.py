"""
NoteStore Backend - Services Layer
====================================

Service Inventory:
    - NoteStore: note name validation, path derivation and async file I/O
"""
