"""
Cross-Post Service
==================

Publishes one post (text + images) to several platforms at once.

Pipeline for a single request:
1. validate the text and resolve the requested targets
2. every requested target must have credentials (all-or-nothing)
3. authenticate the targets that have no session yet (all-or-nothing)
4. process each image once, shared by all targets
5. post to every target concurrently; one target failing never affects another
6. delete all temporary files, whatever happened
"""

import logging
from concurrent.futures import ThreadPoolExecutor, wait
from functools import partial

from .cleanup import cleanup_scope
from .errors import (
    AllTargetsFailedError, AuthError, ConfigError, TargetTimeoutError,
    TranscodeError, ValidationError,
)
from .image_processing import MAX_FILE_SIZE, MAX_IMAGE_DIMENSION, transcode
from .models import AggregateResponse, TargetResult, TranscodedFile
from .platforms import build_targets, BlueskyConfig, TwitterConfig
from .platforms.bluesky import DEFAULT_SERVICE as BLUESKY_DEFAULT_SERVICE

logger = logging.getLogger(__name__)

DEFAULT_TARGET_TIMEOUT = 120
DEFAULT_MAX_WORKERS = 8
PROCESSED_SUFFIX = '_processed'


class CrossPostService:
    """
    Cross-posting service.

    Targets are either passed in directly or built from Flask config by
    init_app(). Configuration keys:
        CROSSPOST_BLUESKY_SERVICE: Bluesky PDS URL (default https://bsky.social)
        CROSSPOST_BLUESKY_IDENTIFIER / CROSSPOST_BLUESKY_PASSWORD
        CROSSPOST_TWITTER_API_KEY / CROSSPOST_TWITTER_API_SECRET
        CROSSPOST_TWITTER_ACCESS_TOKEN / CROSSPOST_TWITTER_ACCESS_TOKEN_SECRET
        CROSSPOST_TARGET_TIMEOUT: Seconds one target may take (default 120)
        CROSSPOST_MAX_WORKERS: Thread pool size (default 8)
        CROSSPOST_MAX_FILE_SIZE / CROSSPOST_MAX_IMAGE_DIMENSION: Image budget
    """

    def __init__(self, targets=None, max_file_size=MAX_FILE_SIZE,
                 max_image_dimension=MAX_IMAGE_DIMENSION,
                 target_timeout=DEFAULT_TARGET_TIMEOUT,
                 max_workers=DEFAULT_MAX_WORKERS, app=None):
        self.targets = dict(targets or {})
        self.max_file_size = max_file_size
        self.max_image_dimension = max_image_dimension
        self.target_timeout = target_timeout
        self.max_workers = max_workers

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        """Build the targets from Flask app configuration"""
        configs = {
            'bluesky': BlueskyConfig(
                service=app.config.get('CROSSPOST_BLUESKY_SERVICE') or BLUESKY_DEFAULT_SERVICE,
                identifier=app.config.get('CROSSPOST_BLUESKY_IDENTIFIER') or '',
                password=app.config.get('CROSSPOST_BLUESKY_PASSWORD') or '',
            ),
            'twitter': TwitterConfig(
                consumer_key=app.config.get('CROSSPOST_TWITTER_API_KEY') or '',
                consumer_secret=app.config.get('CROSSPOST_TWITTER_API_SECRET') or '',
                access_token=app.config.get('CROSSPOST_TWITTER_ACCESS_TOKEN') or '',
                access_token_secret=app.config.get('CROSSPOST_TWITTER_ACCESS_TOKEN_SECRET') or '',
            ),
        }
        self.targets = build_targets(configs)
        self.target_timeout = float(app.config.get('CROSSPOST_TARGET_TIMEOUT', DEFAULT_TARGET_TIMEOUT))
        self.max_workers = int(app.config.get('CROSSPOST_MAX_WORKERS', DEFAULT_MAX_WORKERS))
        self.max_file_size = int(app.config.get('CROSSPOST_MAX_FILE_SIZE', MAX_FILE_SIZE))
        self.max_image_dimension = int(app.config.get('CROSSPOST_MAX_IMAGE_DIMENSION', MAX_IMAGE_DIMENSION))

        for name, target in self.targets.items():
            if not target.validate_config():
                logger.warning(f"{name} credentials not configured - posting to {name} disabled")
        logger.info(f"Cross-post targets: {', '.join(self.targets)}")

    @property
    def max_attachments(self):
        """Largest attachment count any registered target accepts."""
        return max((t.max_attachments for t in self.targets.values()), default=0)

    def _run_all(self, calls, timeout=None):
        """Run callables concurrently.

        Returns (value, exception) per call, in the order given. A call still
        running after timeout seconds gets a TargetTimeoutError.
        """
        if not calls:
            return []

        executor = ThreadPoolExecutor(max_workers=max(1, min(self.max_workers, len(calls))))
        try:
            futures = [executor.submit(call) for call in calls]
            done, _ = wait(futures, timeout=timeout)
            outcomes = []
            for future in futures:
                if future not in done:
                    future.cancel()
                    outcomes.append((None, TargetTimeoutError()))
                elif future.exception() is not None:
                    outcomes.append((None, future.exception()))
                else:
                    outcomes.append((future.result(), None))
            return outcomes
        finally:
            # Hung calls keep running in the background; they are reported as timeouts
            executor.shutdown(wait=False, cancel_futures=True)

    def _resolve_targets(self, names):
        if not self.targets:
            raise ValidationError('No cross-post targets are registered')

        requested = []
        for name in names or list(self.targets):
            if name not in requested:
                requested.append(name)

        unknown = [name for name in requested if name not in self.targets]
        if unknown:
            raise ValidationError(
                f"Unknown target(s): {', '.join(unknown)}. "
                f"Must be one of: {', '.join(self.targets)}"
            )
        return [(name, self.targets[name]) for name in requested]

    def _check_config(self, selected):
        errors = [
            f"{name.title()} credentials not configured"
            for name, target in selected
            if not target.validate_config()
        ]
        if errors:
            raise ConfigError(errors)

    def _authenticate(self, selected):
        pending = [(name, target) for name, target in selected if not target.is_authenticated()]
        outcomes = self._run_all([target.authenticate for _, target in pending], timeout=self.target_timeout)

        errors = [
            f"{name}: {error}"
            for (name, _), (_, error) in zip(pending, outcomes)
            if error is not None
        ]
        if errors:
            for error in errors:
                logger.error(f"Authentication failed - {error}")
            raise AuthError('Authentication failed', errors)

    def _transcode_all(self, images, cleanup):
        """Process every image once. Returns ([(TranscodedFile, index)], [errors])."""
        jobs = []
        for image in images:
            processed_path = f"{image.path}{PROCESSED_SUFFIX}"
            cleanup.append(processed_path)
            jobs.append(TranscodedFile(path=processed_path, mime_type=image.mime_type))

        outcomes = self._run_all([
            partial(transcode, image.path, job.path, image.mime_type,
                    self.max_file_size, self.max_image_dimension)
            for image, job in zip(images, jobs)
        ])

        processed, errors = [], []
        for index, (job, (_, error)) in enumerate(zip(jobs, outcomes)):
            if error is None:
                processed.append((job, index))
            else:
                logger.error(f"Image {index + 1} could not be processed: {error}")
                errors.append(f"Image {index + 1}: {error}")

        if images and not processed:
            raise TranscodeError('None of the uploaded images could be processed', errors)
        return processed, errors

    def _upload_all(self, target, files):
        outcomes = self._run_all([
            partial(target.upload_media, f.path, f.mime_type) for f in files
        ])
        for _, error in outcomes:
            if error is not None:
                raise error
        return [value for value, _ in outcomes]

    def _publish(self, target, text, processed, alt_texts):
        """Upload the media for one target, then create its post."""
        attachments = processed[:target.max_attachments]
        media_refs = self._upload_all(target, [f for f, _ in attachments])
        target_alts = [
            alt_texts[index] if index < len(alt_texts) else ''
            for _, index in attachments
        ]
        return target.create_post(text, media_refs, target_alts)

    def _fan_out(self, selected, text, processed, alt_texts):
        outcomes = self._run_all(
            [partial(self._publish, target, text, processed, alt_texts) for _, target in selected],
            timeout=self.target_timeout,
        )

        results = []
        for (name, _), (data, error) in zip(selected, outcomes):
            if error is None:
                logger.info(f"Posted to {name}")
                results.append(TargetResult(platform=name, success=True, data=data))
            else:
                logger.error(f"{name} post error: {error}")
                results.append(TargetResult(platform=name, success=False, error=str(error)))
        return results

    def post(self, request):
        """
        Publish a PostRequest to its targets.

        Returns:
            AggregateResponse (at least one target succeeded)

        Raises:
            ValidationError: empty text or unknown targets
            ConfigError: a requested target has no credentials
            AuthError: a requested target failed to authenticate
            TranscodeError: images were sent but none could be processed
            AllTargetsFailedError: every target failed to post
        """
        with cleanup_scope(image.path for image in request.images) as cleanup:
            if not (request.text or '').strip():
                raise ValidationError('Text content is required')

            selected = self._resolve_targets(request.targets)
            self._check_config(selected)
            self._authenticate(selected)

            processed, transcode_errors = self._transcode_all(request.images, cleanup)
            results = self._fan_out(selected, request.text, processed, request.alt_texts)

        response = AggregateResponse(
            results=results,
            image_count=len(request.images),
            transcode_errors=transcode_errors,
        )
        if response.all_failed:
            raise AllTargetsFailedError(results, image_count=response.image_count)
        return response
