"""Exception types raised at the edges of the learning core.

Most failure modes degrade to a safe default (empty store, skipped log
line). These exceptions cover the cases where the caller has to be told.
"""


class AgentMindError(Exception):
    """Base class for AgentMind errors."""


class InstinctNotFoundError(AgentMindError, KeyError):
    """A lifecycle operation referenced an instinct id that is not stored."""

    def __init__(self, instinct_id: str) -> None:
        self.instinct_id = instinct_id
        super().__init__(f"No instinct with id '{instinct_id}'")

    def __str__(self) -> str:
        return str(self.args[0])


class ImportFormatError(AgentMindError, ValueError):
    """An import payload could not be read or does not have the expected shape."""
