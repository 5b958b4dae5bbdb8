from typing import Optional


class PaymentsError(Exception):
    """Base class for every error that aborts a run."""


class InputAccessError(PaymentsError):
    """Input file is missing or unreadable."""


class MalformedRowError(PaymentsError):
    """A row fails schema validation."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.message = message
        self.line = line
        super().__init__(self._render())

    def _render(self) -> str:
        if self.line is None:
            return self.message
        return f"line {self.line}: {self.message}"

    def at_line(self, line: int) -> "MalformedRowError":
        """Attach the input line number, keeping the concrete error class."""
        self.line = line
        self.args = (self._render(),)
        return self


class MissingAmountError(MalformedRowError):
    pass


class UnknownTransactionTypeError(MalformedRowError):
    pass
