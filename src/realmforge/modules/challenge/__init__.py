"""Caller-facing challenge API."""

from realmforge.modules.challenge.service import ChallengeService

__all__ = ["ChallengeService"]
