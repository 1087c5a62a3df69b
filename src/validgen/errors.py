"""Generation-time error taxonomy.

Every error raised while parsing annotations or generating code derives from
GenerationError. These are terminal: generation never continues past one.
Runtime validation failures are plain data and never appear here.
"""


class GenerationError(Exception):
    """Base class for failures that abort code generation."""

    def __init__(self, message: str, location: str | None = None):
        self.message = message
        self.location = location
        super().__init__(message)

    def with_location(self, location: str) -> "GenerationError":
        """Attach a source location if none is set yet and return self."""
        if self.location is None:
            self.location = location
        return self

    def __str__(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class AnnotationSyntaxError(GenerationError):
    """Raised when annotation text does not match the rule grammar."""

    def __init__(self, message: str, text: str, position: int,
                 hint: str | None = None, location: str | None = None):
        self.text = text
        self.position = position
        self.hint = hint
        super().__init__(message, location)

    @property
    def column(self) -> int:
        """1-based column of the offending character."""
        return self.position + 1

    def render_caret(self) -> str:
        """Render the annotation text with a caret under the error position."""
        return f"{self.text}\n{' ' * self.position}^"

    def __str__(self) -> str:
        detail = f"{self.message} (column {self.column})"
        if self.hint:
            detail += f"; hint: {self.hint}"
        if self.location:
            return f"{self.location}: {detail}"
        return detail


class DuplicateValidatorError(GenerationError):
    """Raised when one slot on a field names the same validator twice."""

    def __init__(self, name: str, field: str, element: bool = False,
                 location: str | None = None):
        self.name = name
        self.field = field
        self.element = element
        kind = "element validator" if element else "validator"
        super().__init__(f"duplicate {kind} `{name}` on field `{field}`", location)


class StructuralError(GenerationError):
    """Raised when a record's shape cannot be generated for."""


class UnknownOptionError(GenerationError):
    """Raised for an unrecognized struct-level option name."""

    def __init__(self, option: str, allowed: tuple[str, ...], location: str | None = None):
        self.option = option
        self.allowed = allowed
        expected = " or ".join(f"`{name}`" for name in allowed)
        super().__init__(
            f"unknown struct-level option: `{option}`. Expected {expected}",
            location,
        )
