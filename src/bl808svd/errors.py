from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]


class ExtractionError(Exception):
    """Base class for everything the extractor raises on bad input."""

    def __init__(self, message: str, filename: Optional[PathLike] = None):
        self.message = message
        self.filename = str(filename) if filename is not None else None
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.filename:
            return f"{self.filename}: {self.message}"
        return self.message

    def with_filename(self, filename: PathLike) -> "ExtractionError":
        if self.filename is None:
            self.filename = str(filename)
            self.args = (str(self),)
        return self


class SourceUnavailable(ExtractionError):
    pass


class ParseError(ExtractionError):
    """Grammar mismatch; `rule` names the rule that failed to match."""

    def __init__(
        self,
        rule: str,
        message: str,
        line: Optional[int] = None,
        filename: Optional[PathLike] = None,
    ):
        self.rule = rule
        self.line = line
        super().__init__(message, filename)

    def __str__(self) -> str:
        where = f"line {self.line}: " if self.line is not None else ""
        text = f"{where}{self.rule}: {self.message}"
        if self.filename:
            return f"{self.filename}: {text}"
        return text


class MalformedHeader(ParseError):
    pass


class MalformedTable(ParseError):
    pass


class DanglingContinuationRow(ParseError):
    def __init__(self, line: Optional[int] = None, filename: Optional[PathLike] = None):
        super().__init__("continuation_row", "continuation row has no preceding field", line, filename)


class UnknownAccessMode(ExtractionError):
    def __init__(self, token: str, line: Optional[int] = None, filename: Optional[PathLike] = None):
        self.token = token
        self.line = line
        where = f"line {line}: " if line is not None else ""
        super().__init__(f"{where}unknown access mode: {token!r}", filename)


class ModelInvalid(ExtractionError):
    pass


class ArrayPeripheralNotSupported(ExtractionError):
    pass


class CatalogError(ExtractionError):
    pass
