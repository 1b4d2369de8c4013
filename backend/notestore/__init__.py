"""
NoteStore Backend - Application Package
=========================================

A small HTTP service that keeps plain-text notes as files, one
`<name>.txt` per note, in a configured storage directory.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │       NoteStore (Service Layer)     │  ← name safety, file I/O, error mapping
    ├─────────────────────────────────────┤
    │        Schemas (API Contracts)      │  ← Pydantic models
    ├─────────────────────────────────────┤
    │     Storage directory (*.txt)       │  ← the durable record
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
