"""
Error taxonomy for the generation pipeline.

Every failure a caller can observe is a GenerationError subclass. Each class
carries a stable `kind` (reported by the CLI and the API) and the HTTP status
the API maps it to: 4xx for request validation, 5xx for staging, compiler and
filesystem problems.
"""

from pathlib import Path
from typing import Optional


class GenerationError(Exception):
    """Base class for all pipeline failures."""

    kind = "GenerationError"
    http_status = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.message}


class InvalidLanguage(GenerationError):
    kind = "InvalidLanguage"
    http_status = 400

    def __init__(self, lang: str, supported):
        self.lang = lang
        self.supported = tuple(supported)
        super().__init__(
            f"Unsupported language: {lang!r}. Use one of: {', '.join(self.supported)}"
        )


class UnsupportedVariant(GenerationError):
    kind = "UnsupportedVariant"
    http_status = 400

    def __init__(self, name: str, available):
        self.name = name
        self.available = tuple(available)
        super().__init__(
            f"Unsupported template: {name!r}. Use one of: {', '.join(self.available)}"
        )


class InvalidPerson(GenerationError):
    """Person identifier that cannot be used as a directory name."""

    kind = "InvalidPerson"
    http_status = 400

    def __init__(self, person: str):
        self.person = person
        super().__init__(f"Invalid person identifier: {person!r}")


class PersonNotFound(GenerationError):
    kind = "PersonNotFound"
    http_status = 404

    def __init__(self, person: str, path: Path):
        self.person = person
        self.path = Path(path)
        super().__init__(
            f"Person directory not found: {self.path}. Create it with required files."
        )


class PersonExists(GenerationError):
    kind = "PersonExists"
    http_status = 409

    def __init__(self, person: str, path: Path):
        self.person = person
        self.path = Path(path)
        super().__init__(f"Person already exists: {self.path}")


class MissingAsset(GenerationError):
    """
    A mandatory input file is absent.

    Attributes:
        asset: Which asset is missing (e.g. "profile_data", "content_de", "template")
        path: Path where the asset was expected
    """

    kind = "MissingAsset"
    http_status = 404

    def __init__(self, asset: str, path: Path):
        self.asset = asset
        self.path = Path(path)
        super().__init__(f"Missing {asset}: expected file at {self.path}")


class InvalidImage(GenerationError):
    kind = "InvalidImage"
    http_status = 400

    def __init__(self, path: Optional[Path], message: str, suggestion: str = ""):
        self.path = Path(path) if path is not None else None
        self.suggestion = suggestion
        parts = [message]
        if suggestion:
            parts.append(suggestion)
        super().__init__(". ".join(parts))


class StagingFailed(GenerationError):
    kind = "StagingFailed"
    http_status = 500

    def __init__(self, asset: str, reason: str = ""):
        self.asset = asset
        self.reason = reason
        message = f"Failed to stage {asset} into workspace"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class CompileFailed(GenerationError):
    """
    The compiler exited non-zero (or could not be started).

    Attributes:
        diagnostics: Compiler stderr/stdout, verbatim
        returncode: Exit status (None if the compiler never ran)
    """

    kind = "CompileFailed"
    http_status = 500

    def __init__(self, diagnostics: str, returncode: Optional[int] = None):
        self.diagnostics = diagnostics
        self.returncode = returncode

        if returncode is None:
            message = "Compiler could not be started"
        else:
            message = f"Compiler exited with status {returncode}"
        first_line = next((line for line in diagnostics.splitlines() if line.strip()), "")
        if first_line:
            message += f": {first_line.strip()}"
        super().__init__(message)


class CompileTimeout(GenerationError):
    kind = "CompileTimeout"
    http_status = 504

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Compiler did not finish within {timeout:g}s")


class OutputMissing(GenerationError):
    kind = "OutputMissing"
    http_status = 500

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"Compiler reported success but produced no file at {self.path}")
