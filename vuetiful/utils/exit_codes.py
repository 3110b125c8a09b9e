"""Centralized exit codes for the vuetiful CLI."""


class ExitCodes:
    """Standard exit codes for vuetiful commands."""

    SUCCESS = 0

    # No root has a vuetify installation
    NOT_DETECTED = 1

    # Some roots failed to extract; the rest were indexed
    PARTIAL_FAILURE = 2

    # Discovery itself failed, nothing was indexed
    CRITICAL = 3

    @classmethod
    def get_description(cls, code: int) -> str:
        """Get human-readable description for an exit code."""
        descriptions = {
            cls.SUCCESS: "Success - utilities extracted",
            cls.NOT_DETECTED: "Vuetify not detected in any workspace root",
            cls.PARTIAL_FAILURE: "Extraction failed for one or more roots",
            cls.CRITICAL: "Extraction could not run",
        }
        return descriptions.get(code, f"Unknown exit code: {code}")

    @classmethod
    def from_report(cls, report) -> int:
        """Exit code summarizing an ExtractionReport."""
        if "*" in report.failed:
            return cls.CRITICAL
        if report.failed:
            return cls.PARTIAL_FAILURE
        if not report.record_roots:
            return cls.NOT_DETECTED
        return cls.SUCCESS
