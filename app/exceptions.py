# app/exceptions.py
"""
Domain errors raised by the services.
Each carries the HTTP status the API layer answers with; main.py maps
them to {"detail": ...} responses in one handler.
"""


class VehicleTrackerError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class InvalidInput(VehicleTrackerError):
    """Malformed or missing input (empty id lists, duplicate username...)."""
    status_code = 400


class NotFound(VehicleTrackerError):
    """Referenced vehicle/request/user absent, or not visible to the caller."""
    status_code = 404


class AccessDenied(VehicleTrackerError):
    """Ownership or role violation on a mutation."""
    status_code = 403


class AlreadyProcessed(VehicleTrackerError):
    """Share request already accepted or rejected."""
    status_code = 400


class StorageError(VehicleTrackerError):
    status_code = 500


class LicenseExpired(VehicleTrackerError):
    status_code = 402
