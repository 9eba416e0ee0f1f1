"""Services Layer — AI route orchestration, metadata embedding and webhook fan-out.

Invariants:
    - Services receive providers and sessions as arguments; none builds its own client
    - Provider failures surface as typed errors or documented literal fallbacks
"""
