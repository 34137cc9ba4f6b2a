"""
docadapter Test Suite.

This package contains:
- unit/: Unit tests (adapter, store, query, models, config)
- integration/: Adapter + SQLite store + versioned models together
"""
