"""Core Layer — RSL documents, access rules and AI fallbacks as pure functions.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Clock and ids are injected, so every function is deterministic under test

Design Decisions:
    - XML rendering, policy checks and literal fallbacks live here; the shell
      around them only does IO
"""
