"""
DevFlow Backend: Application Package
=====================================

Layers:

    ┌─────────────────────────────────────┐
    │   Routes (API + server pages)       │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services                          │  ← Q&A workflows, sessions
    ├─────────────────────────────────────┤
    │   Models (schemas + registry)       │  ← document schemas compiled
    │                                     │    into storage bindings
    ├─────────────────────────────────────┤
    │   Database                          │  ← async SQLAlchemy engine
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
