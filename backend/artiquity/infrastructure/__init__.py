"""Infrastructure Layer — provider clients, database, security and delivery plumbing.

Invariants:
    - Only core/errors and core/provider_protocols are imported from core/
    - Provider failures are mapped to ProviderAPIError; webhook and image
      failures are returned as outcomes instead of raised
"""
