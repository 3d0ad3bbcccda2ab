"""SciPlayer Application Package: device registry and playlist attachment API.

Invariants:
    - Package root contains no executable code (no import side-effects)
"""
