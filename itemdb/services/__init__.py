"""Services Layer: Collection Stores and the database that hands them out.

Invariants:
    - Services orchestrate IO (engine calls) around pure core transformations
    - One CollectionStore per collection name per ItemDatabase

Design Decisions:
    - Impure shell over functional core: collection_ops decides, the store persists
"""
