"""Artiquity Application Package — creative-ideation AI proxy and RSL licensing server.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Only the version constant lives here: explicit imports only, no star
      exports, no auto-discovery
"""

__version__ = "1.0.0"
