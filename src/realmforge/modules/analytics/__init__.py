"""Collaborator protocols for analytics recording and difficulty advice."""

from realmforge.modules.analytics.collaborators import (
    AnalyticsRecorder,
    DifficultyAdvisor,
    LoggingAnalyticsRecorder,
    StaticDifficultyAdvisor,
)

__all__ = [
    "AnalyticsRecorder",
    "DifficultyAdvisor",
    "LoggingAnalyticsRecorder",
    "StaticDifficultyAdvisor",
]
