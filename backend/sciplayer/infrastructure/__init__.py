"""Infrastructure: SQLite session management, the playlist store and logging.

Invariants:
    - Only this package touches the database
"""
