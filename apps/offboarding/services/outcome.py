"""Typed result of a lifecycle or checklist operation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

CONFLICT_MESSAGE = 'This task was modified by another user. Please refresh and try again.'
PROCESS_CONFLICT_MESSAGE = 'This process was modified by another user. Please refresh and try again.'


@dataclass(frozen=True)
class Outcome:
    status: str
    reason: str = ''
    value: Optional[Any] = None

    SUCCESS = 'success'
    BLOCKED = 'blocked'
    CONFLICT = 'conflict'

    @classmethod
    def success(cls, value=None) -> 'Outcome':
        return cls(cls.SUCCESS, value=value)

    @classmethod
    def blocked(cls, reason: str) -> 'Outcome':
        return cls(cls.BLOCKED, reason=reason)

    @classmethod
    def conflict(cls, reason: str = CONFLICT_MESSAGE) -> 'Outcome':
        return cls(cls.CONFLICT, reason=reason)

    @property
    def ok(self) -> bool:
        return self.status == self.SUCCESS

    @property
    def is_blocked(self) -> bool:
        return self.status == self.BLOCKED

    @property
    def is_conflict(self) -> bool:
        return self.status == self.CONFLICT
