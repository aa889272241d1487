from __future__ import annotations


class RoundError(Exception):
    pass


class InvalidRoundInput(RoundError, ValueError):
    """Rejected input; the round was left untouched."""


class RoundNotComplete(RoundError):
    """Completion was requested while some targets are still unresolved."""

    def __init__(self, round_id: str, missing: list[int]):
        self.round_id = round_id
        self.missing = missing
        super().__init__(
            f"round {round_id} has {len(missing)} unresolved shot(s): {missing}"
        )


class RoundNotFound(InvalidRoundInput, LookupError):
    """No in-progress round to act on."""


class InvalidRoundRecord(RoundError, ValueError):
    pass


__all__ = [
    "RoundError",
    "InvalidRoundInput",
    "RoundNotComplete",
    "RoundNotFound",
    "InvalidRoundRecord",
]
