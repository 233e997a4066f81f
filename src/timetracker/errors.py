"""Error types raised by the timetracker package.

All errors derive from TTError, which carries a list of context strings
("while ...") that callers can add while the error propagates up.
"""


class TTError(Exception):
    """Base class for all timetracker errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.context: list[str] = []

    def with_context(self, context: str) -> "TTError":
        """Add a context line and return the error itself (for re-raising)."""
        self.context.append(context)
        return self

    def describe(self) -> str:
        return self.message

    def __str__(self) -> str:
        text = self.describe()
        if self.context:
            text += "\n" + "\n".join(f"while {c}" for c in self.context)
        return text


class ParseError(TTError):
    """A log line could not be parsed."""

    def __init__(self, message: str, line: str) -> None:
        super().__init__(message)
        self.line = line

    def describe(self) -> str:
        return f"parse error: {self.message} at: {self.line}"


class ValidationError(ParseError):
    """A log line parsed fine but does not fit the lines before it."""


class LogIOError(TTError):
    """Reading from or writing to a log file failed."""

    def __init__(self, error: OSError | UnicodeDecodeError) -> None:
        super().__init__(str(error))
        self.error = error


class UsageError(TTError):
    def describe(self) -> str:
        return f"Usage error: {self.message}"


class ActivityConfigError(TTError):
    def describe(self) -> str:
        return f"activity file error: {self.message}"


class CollectorFinalizedError(TTError):
    """The collector was used after finalize()."""
