"""Domain Core: error taxonomy, domain types and boundary contracts.

Invariants:
    - No imports from infrastructure, api or FastAPI
"""
