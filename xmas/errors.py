from typing import Optional


class XmasError(Exception):
    """Base class for every error raised while running an xmas program."""


class XmasSyntaxError(XmasError):
    """Raised by the parser for the first syntax error it meets.

    Carries the 1-based position and the offending source line so the
    message can point at the failing token with a caret.
    """
    def __init__(self, message: str, line: int, column: int, source_line: Optional[str] = None):
        self.message = message
        self.line = line
        self.column = column
        self.source_line = source_line
        super().__init__(self.render())

    def render(self) -> str:
        text = f"Syntax error at line {self.line}, column {self.column}: {self.message}"
        if self.source_line is not None:
            caret = ' ' * (max(self.column, 1) - 1) + '^'
            text += f"\n    {self.source_line}\n    {caret}"
        return text


class XmasRuntimeError(XmasError):
    """Exception type used to propagate xmas runtime errors."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
