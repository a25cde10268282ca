"""
Errors
======

Every failure raised by the loaders or the engine is fatal for the run.
Loaders collect all problems in one input file before raising so a single
run reports everything wrong with that file.
"""

from typing import Iterable


class PrioritizationError(Exception):
    """Base class for all errors raised by this package."""


class DataValidationError(PrioritizationError, ValueError):
    """Input data violates a load-time invariant."""

    def __init__(self, source: str, problems: Iterable[str]):
        self.source = source
        self.problems = list(problems)
        lines = "\n".join(f"  - {p}" for p in self.problems)
        super().__init__(f"Data validation failed for {source}:\n{lines}")


class MissingProfileError(DataValidationError, KeyError):
    """A parcel usetype has no demand profile."""

    def __init__(self, usetypes: Iterable[str]):
        self.usetypes = sorted(set(usetypes))
        super().__init__(
            "demand profiles",
            [f"no profile for usetype '{u}'" for u in self.usetypes],
        )

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return Exception.__str__(self)
