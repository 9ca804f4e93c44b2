"""
Service layer.

Each service encapsulates business logic and talks to storage only
through the injected ``SheetStore``, so the API handlers stay thin and
the same actions run against SQLite or an in-memory store.
"""
