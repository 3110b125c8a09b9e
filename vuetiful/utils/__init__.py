"""vuetiful utilities package."""

from .error_handler import handle_exceptions
from .exit_codes import ExitCodes
from .logging import LogFacility

__all__ = [
    "ExitCodes",
    "LogFacility",
    "handle_exceptions",
]
