"""
Cross-Post Errors
=================

Exception hierarchy for the cross-post pipeline.

Request-level errors (validation, config, auth, transcode, all-targets-failed)
propagate out of CrossPostService.post(). Target-level errors (upload, post,
platform) are caught at the fan-out boundary and turned into TargetResults.
"""


class CrossPostError(Exception):
    """Base class for every cross-post failure."""


class ValidationError(CrossPostError):
    """The request itself is malformed (missing text, unknown target, bad upload)."""


class ConfigError(CrossPostError):
    """One or more requested targets are missing credentials."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__('; '.join(self.errors) or 'Target configuration invalid')


class AuthError(CrossPostError):
    """A target could not authenticate.

    Raised by a single target with one message, or by the service with the
    list of every target that failed the authentication gate.
    """

    def __init__(self, message, errors=None):
        self.errors = list(errors) if errors else [message]
        super().__init__(message)


class TranscodeError(CrossPostError):
    """An image could not be decoded or the processed copy could not be written."""

    def __init__(self, message, errors=None):
        self.errors = list(errors) if errors else [message]
        super().__init__(message)


class UploadError(CrossPostError):
    """Media upload to a target failed."""


class PostError(CrossPostError):
    """Post creation was attempted without an authenticated session."""


class PlatformError(CrossPostError):
    """The remote platform rejected a request."""

    def __init__(self, message, status_code=None):
        self.status_code = status_code
        super().__init__(message)


class TargetTimeoutError(CrossPostError):
    """A target call did not finish within the configured timeout."""

    def __init__(self):
        super().__init__('timeout')


class AllTargetsFailedError(CrossPostError):
    """Every requested target failed; carries the per-target results."""

    def __init__(self, results, image_count=0):
        self.results = list(results)
        self.image_count = image_count
        super().__init__('All posts failed')
