"""API Layer — FastAPI routers for the AI proxy and the RSL licensing server.

Invariants:
    - Routers registered explicitly in main.py; every path sits under /api/v1
      except the public /rsl/{license_id} document
    - Failures leave as the shared error envelope (error_handlers.py)

Design Decisions:
    - Principals, providers and rate limits arrive through dependencies.py so
      handlers read as request -> service -> response
"""
