"""Core Layer: pure collection logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, db/ or models/
    - All functions are pure and deterministic (identifier generation is injected)

Design Decisions:
    - Functional core separated from imperative shell: the Collection Store
      orchestrates IO around the pure sequence transformations defined here
"""
