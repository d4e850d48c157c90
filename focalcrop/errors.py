"""
Exception types raised by the crop derivation and distribution pipeline.
"""

from typing import Optional


class FocalCropError(Exception):
    """Base exception for all pipeline errors."""

    pass


class ConfigurationError(FocalCropError):
    """Configuration is missing or invalid."""

    pass


class InvalidDimensions(FocalCropError, ValueError):
    """Source or target dimensions are not positive."""

    pass


class InvalidFocalPoint(FocalCropError, ValueError):
    """Focal point coordinates fall outside the unit square."""

    pass


class ImageNotReady(FocalCropError):
    """Source image has not been decoded or has zero dimensions."""

    pass


class AuthenticationFailed(FocalCropError):
    """Identity provider rejected the client credentials."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ''):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        if self.status_code is None:
            return super().__str__()
        return f"{super().__str__()} ({self.status_code}): {self.body}"


class RepositoryError(FocalCropError):
    """A content repository GraphQL call failed."""

    pass


class ProvisioningFailed(FocalCropError):
    """A folder path segment could not be created, even after a recheck."""

    def __init__(self, message: str, path: str = ''):
        super().__init__(message)
        self.path = path


class PresignRequestFailed(FocalCropError):
    """Repository refused to issue a presigned upload target."""

    pass


class UploadFailed(FocalCropError):
    """Binary transfer to the presigned target was rejected or failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ''):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
