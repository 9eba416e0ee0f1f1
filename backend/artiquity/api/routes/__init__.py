"""Route Modules — one router per licensing resource or AI wizard area.

Invariants:
    - Each module owns its APIRouter prefix (/api/v1/<area>) and tags
    - Handlers validate, call a service or core function, and shape the response

Design Decisions:
    - licenses.py exposes a second, un-prefixed router for the public /rsl document
"""
