"""Provider boundary shared by all AI backends."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..errors import ErrorRecord


@runtime_checkable
class Provider(Protocol):
    """One blocking round trip to a generative-AI backend.

    Implementations never raise vendor exceptions and never retry: every
    failure comes back as an ErrorRecord for the RetryController to judge.
    """

    name: str

    async def complete(self, system_prompt: str, user_prompt: str) -> str | ErrorRecord:
        ...
