"""
Domain errors raised by the service layer.

Routers translate these into HTTP responses; services never build
HTTPException themselves.
"""


class ShortLinkError(Exception):
    """Base class for short link service errors"""


class ShortCodeValidationError(ShortLinkError):
    """Custom short code is malformed, reserved or already taken"""


class LinkNotFoundError(ShortLinkError):
    """No short link with the requested id"""


class LinkPermissionError(ShortLinkError):
    """Short link belongs to another user"""


class DuplicateUserError(ShortLinkError):
    """A user with this email is already registered"""
