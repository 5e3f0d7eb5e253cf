"""
Realmforge: challenge lifecycle and progression engine.

Layers
------
- core: configuration, logging, events, database, per-user locks
- domain: rich domain models (Character, Challenge and friends)
- modules: realm strategies, attempt tracking, rewards, engine, service
- bootstrap: application wiring
"""

__version__ = "0.1.0"
