"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every feature leans on: the memoized
database handle and environment settings. Feature-specific SQL and lookup
logic live in the feature package (e.g. `events/`).
"""
