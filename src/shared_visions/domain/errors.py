"""Error taxonomy surfaced to callers of the services."""


class SharedVisionsError(Exception):
    """Base error carrying a user-facing message."""

    message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class AuthError(SharedVisionsError):
    """Authentication failure."""


class SignUpFailedError(AuthError):
    message = "Failed to create account. Please try again."


class SignInFailedError(AuthError):
    message = "Failed to sign in. Please check your credentials."


class NotAuthenticatedError(AuthError):
    message = "You are not signed in."


class ProfileNotFoundError(AuthError):
    message = "Profile not found."


class StorageError(SharedVisionsError):
    """Object storage failure."""


class ImageEncodingError(StorageError):
    message = "Failed to process image."


class UploadFailedError(StorageError):
    message = "Failed to upload file."


class DownloadFailedError(StorageError):
    message = "Failed to download file."


class DeleteFailedError(StorageError):
    message = "Failed to delete file."


class GenerationError(SharedVisionsError):
    """AI generation failure."""


class GenerationFailedError(GenerationError):
    message = "Failed to generate image. Please try again."


class ParsingFailedError(GenerationError):
    message = "Failed to process the generated image."


class UnsupportedOperationError(GenerationError):
    message = "Image generation is not available."


class RateLimitExceededError(GenerationError):
    message = "Rate limit exceeded. Please wait a moment and try again."
