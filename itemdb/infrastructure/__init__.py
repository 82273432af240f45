"""Infrastructure Layer: key-value engines and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from services/
    - Every engine failure surfaces as a StorageError subclass (core/errors.py)

Design Decisions:
    - Engines satisfy core.repository_protocols.KeyValueEngine structurally,
      no shared base class
"""
