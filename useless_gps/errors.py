"""Errors raised by Useless GPS.

All of them are recoverable at the caller boundary: the user can fix the
input or simply try again.
"""


class UselessGPSError(Exception):
    """Base class for every error the guide reports to the user"""


class InsufficientInput(UselessGPSError):
    """Start or destination missing"""

    def __init__(self, message: str = "Enter start & destination"):
        super().__init__(message)


class GeocodeNotFound(UselessGPSError):
    """One or both place names could not be resolved"""

    def __init__(self, names: list[str]):
        self.names = list(names)
        super().__init__(f"Couldn't find a location: {', '.join(self.names)}")


class FeatureFetchFailed(UselessGPSError):
    """Feature service error or malformed payload"""


class NoRouteDrawn(UselessGPSError):
    """Playback requested before any route exists"""

    def __init__(self, message: str = "Draw a line first."):
        super().__init__(message)


class NoSamplesAvailable(UselessGPSError):
    """Playback requested without analysed sample points"""

    def __init__(self, message: str = "No samples - run analysis first."):
        super().__init__(message)
