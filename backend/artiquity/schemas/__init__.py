"""Pydantic Schemas — wire contracts of the wizard and the licensing clients.

Invariants:
    - Wizard payloads are camelCase (CamelModel); OAuth form bodies keep the
      RFC 6749 snake_case names
    - Enum fields reuse core/domain_types, so invalid values are a 400 at the boundary
"""
