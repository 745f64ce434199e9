"""Custom exceptions for tokenpack."""


class TokenpackError(Exception):
    """Base exception for all tokenpack errors."""

    exit_code = 1


class ConfigError(TokenpackError):
    """Malformed budget or option values, rejected before the pipeline runs."""

    exit_code = 2


class SafetyViolation(TokenpackError):
    """An output target resolves inside the source tree."""

    exit_code = 3

    def __init__(self, target: object, root: object):
        self.target = target
        self.root = root
        super().__init__(
            f"SAFETY: output {target} is inside source directory {root} "
            "(feedback loop)"
        )


class EmptySelection(TokenpackError):
    """Nothing was admitted, so there is nothing to emit."""

    exit_code = 1


class PartialReadError(TokenpackError):
    """A single candidate could not be read at emission time.

    Never raised out of the writer; collected and counted instead.
    """

    def __init__(self, path: object, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class OutputWriteError(TokenpackError):
    """A part file could not be written."""

    def __init__(self, target: object, reason: str):
        self.target = target
        self.reason = reason
        super().__init__(f"Cannot write {target}: {reason}")
