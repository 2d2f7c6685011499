"""
Boundary layer for external system integrations.

Handles all interactions with the persistence engine. Provides the ORM
models and CRUD classes that make up the vector record store.
"""
