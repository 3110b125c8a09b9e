"""Exception taxonomy for extraction.

"No installation located" is not an exception: the locator simply returns
no entry for that root. Everything else that can stop work for a root or a
cycle is raised as one of the classes below.
"""


class VuetifulError(Exception):
    """Base class for all vuetiful errors."""


class ArtifactError(VuetifulError):
    """Extraction failed for a single root.

    Attributes:
        path: Artifact path the failure relates to.
    """

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class SizeExceeded(ArtifactError):
    """Artifact is larger than the parse ceiling. Raised before parsing."""

    def __init__(self, path: str | None, size: int, limit: int):
        size_mb = size / 1024 / 1024
        limit_mb = limit / 1024 / 1024
        super().__init__(
            f"Stylesheet too large ({size_mb:.2f}MB). Maximum size is {limit_mb:.2f}MB. "
            "This file may not be a standard Vuetify stylesheet.",
            path,
        )
        self.size = size
        self.limit = limit


class MalformedArtifact(ArtifactError):
    """The grammar parser rejected the artifact.

    Attributes:
        line: 1-based line of the first parse error, when known.
        column: 1-based column of the first parse error, when known.
    """

    def __init__(self, message: str, path: str | None = None, line: int | None = None, column: int | None = None):
        location = f" (line {line}, column {column})" if line is not None else ""
        super().__init__(f"{message}{location}", path)
        self.line = line
        self.column = column


class ArtifactMissing(ArtifactError):
    """The located stylesheet disappeared before it could be read."""


class ExtractionCancelled(VuetifulError):
    """A newer run superseded this one. Never shown to the user."""


class LocatorError(VuetifulError):
    """Discovery as a whole failed. Fatal for the cycle."""
