"""Error kinds raised by the extraction pipeline."""

from typing import Optional


class ExtractionError(Exception):
    """Base class for extraction failures."""


class ChallengeDetected(ExtractionError):
    """The document is an anti-bot challenge or block page.

    Fatal for the current call. Callers should rotate network identity
    before retrying upstream; the pipeline never retries by itself.
    """

    def __init__(self, marker: str, message: Optional[str] = None):
        self.marker = marker
        super().__init__(
            message
            or f"Challenge page detected (marker: {marker!r}). "
            "The egress IP may be flagged - try rotating to a new identity."
        )


class FieldParseError(ExtractionError):
    """A single field on a single anchor could not be parsed.

    Always swallowed: the field resolves to absent.
    """

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")
