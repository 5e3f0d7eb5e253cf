"""
Realmforge Test Suite
=====================

Test Organization
-----------------
- tests/unit/          : engine, realms, tracker and core, on in-memory infrastructure
- tests/integration/   : SQL store and Redis locks against testcontainers

Markers
-------
unit, domain, integration, database, redis
"""
