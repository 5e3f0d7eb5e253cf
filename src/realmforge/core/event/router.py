"""
Wildcard matching for event names.

A `*` in a pattern matches any run of characters, including dots, so
`"challenge.*"` matches `"challenge.completed"` and `"*.unlocked"` matches
`"realm.unlocked"`.
"""

from __future__ import annotations


class EventRouter:
    """
    Stateless wildcard matcher.

    Examples
    --------
    >>> router = EventRouter()
    >>> router.matches("challenge.completed", "challenge.*")
    True
    >>> router.matches("realm.unlocked", "character.*")
    False
    >>> router.matches("anything", "*")
    True
    """

    def matches(self, event_name: str, pattern: str) -> bool:
        if pattern == "*":
            return True
        if "*" not in pattern:
            return event_name == pattern

        parts = pattern.split("*")
        head, tail = parts[0], parts[-1]

        if not event_name.startswith(head):
            return False
        if len(head) + len(tail) > len(event_name):
            return False
        if tail and not event_name.endswith(tail):
            return False

        position = len(head)
        limit = len(event_name) - len(tail)
        for middle in parts[1:-1]:
            if not middle:
                continue
            found = event_name.find(middle, position, limit)
            if found == -1:
                return False
            position = found + len(middle)

        return True
