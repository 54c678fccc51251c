"""Errors raised by the chain pipeline, tagged with the stage that failed."""


class ChainError(Exception):
    stage = "build"

    def __init__(self, position, cause):
        self.position = position
        self.cause = cause
        name = getattr(position, "value", position)
        super().__init__(f"{self.stage} failed for {name}: {cause}")


class KeyGenerationError(ChainError):
    stage = "keygen"


class SigningError(ChainError):
    stage = "sign"


class ReparseError(ChainError):
    stage = "reparse"


class PersistenceError(ChainError):
    stage = "write"
