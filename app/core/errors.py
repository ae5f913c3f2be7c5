class GalleryError(Exception):
    """Base class for every error raised by the gallery backend."""

    message = "Gallery error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ConfigurationError(GalleryError):
    message = "Gallery is not configured"


class UpstreamUnavailable(GalleryError):
    message = "Error while fetching images"


class FetchFailed(GalleryError):
    message = "Error while fetching an image"

    def __init__(self, url: str, status_code: int | None = None):
        detail = f"HTTP {status_code}" if status_code is not None else "network error"
        super().__init__(f"Could not fetch {url} ({detail})")
        self.url = url
        self.status_code = status_code


class ArchiveBuildFailed(GalleryError):
    message = "Error while creating the ZIP archive"


class AuthRejected(GalleryError):
    message = "Invalid access code"


class AuthUnavailable(GalleryError):
    message = "Access code could not be verified"


class NotAuthenticated(GalleryError):
    message = "Not authenticated"


class NothingSelected(GalleryError):
    message = "No image selected"
