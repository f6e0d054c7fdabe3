class SourceSyntaxError(ValueError):
    """Raised when the parser could not build an error-free tree for a file."""

    def __init__(self, filename: str, line: int, column: int, snippet: str) -> None:
        self.filename = filename
        self.line = line
        self.column = column
        super().__init__(f"{filename}:{line}:{column}: syntax error near {snippet!r}")


class MissingIdentifierError(ValueError):
    """Raised when a generator declaration has no name to attach the location to."""

    def __init__(self, filename: str, line: int) -> None:
        self.filename = filename
        self.line = line
        super().__init__(f"{filename}:{line}: generator function declaration has no identifier")
