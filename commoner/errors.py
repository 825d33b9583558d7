from pathlib import Path


class CommonerError(ValueError):
    """Base class for every failure raised while compiling a module."""


class JavaScriptSyntaxError(CommonerError):
    def __init__(self, path: str | Path, line: int, column: int) -> None:
        self.path = str(path)
        self.line = line
        self.column = column
        super().__init__(f"Syntax error in {self.path} at {line}:{column}")


class ResolutionError(CommonerError):
    """No file matched the require target under the configured extensions."""

    def __init__(self, target: str, basedir: str | Path) -> None:
        self.target = target
        self.basedir = str(basedir)
        super().__init__(f"Cannot find module '{target}' from '{self.basedir}'")


class OutOfRootError(CommonerError):
    """The require target resolved to a file outside of the source root."""

    def __init__(self, target: str, requester: str | Path, root: str | Path) -> None:
        self.target = target
        self.requester = str(requester)
        self.root = str(root)
        super().__init__(
            f"Cannot find module '{target}' from '{self.requester}' under '{self.root}'"
        )


class LegacyDeclarationError(CommonerError):
    def __init__(self, message: str, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(message)


class MissingDeclarationError(LegacyDeclarationError):
    def __init__(self, path: str | Path) -> None:
        super().__init__(f"No identifiers found in {path}", path)


class AmbiguousDeclarationError(LegacyDeclarationError):
    def __init__(self, path: str | Path, identifiers: list[str]) -> None:
        self.identifiers = identifiers
        super().__init__(
            f"Multiple identifiers found in {path}: {', '.join(identifiers)}", path
        )


class InvalidRequireArgument(CommonerError):
    """A require() argument evaluated to something other than a string."""

    def __init__(self, path: str | Path, line: int, value: object) -> None:
        self.path = str(path)
        self.line = line
        self.value = value
        super().__init__(
            f"Invalid require call at {self.path}:{line}, string expected, got {value!r}"
        )


class MultipleExposeError(CommonerError):
    def __init__(self, path: str | Path, targets: list[str]) -> None:
        self.path = str(path)
        self.targets = targets
        super().__init__(
            f"Multiple expose directives in {self.path}: {', '.join(targets)}"
        )


class UnknownHelperError(CommonerError):
    def __init__(self, helper: str) -> None:
        self.helper = helper
        super().__init__(f"No source registered for helper '{helper}'")
