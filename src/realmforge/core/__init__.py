"""
Core infrastructure: configuration, logging, event bus, database and locks.

Nothing in `realmforge.core` knows about challenges or characters.
"""
