"""
Cross-Post Models
=================

Plain dataclasses passed between the upload layer, the service and the routes.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


ALLOWED_MIME_TYPES = ('image/jpeg', 'image/png', 'image/gif')


@dataclass
class UploadedFile:
    """An image saved to disk by the upload layer."""
    path: str
    mime_type: str
    size_bytes: int = 0


@dataclass
class TranscodedFile:
    """Resized/re-encoded copy of an UploadedFile."""
    path: str
    mime_type: str


@dataclass
class PostRequest:
    """
    One authoring request.

    Attributes:
        text: Post body (required, non-empty)
        alt_texts: Alt text per image, aligned by position
        images: Uploaded images in the order they were sent
        targets: Requested target names in order; empty means all registered
    """
    text: str
    alt_texts: List[str] = field(default_factory=list)
    images: List[UploadedFile] = field(default_factory=list)
    targets: List[str] = field(default_factory=list)


@dataclass
class TargetResult:
    platform: str
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {'platform': self.platform, 'success': self.success}
        if self.data is not None:
            result['data'] = self.data
        if self.error is not None:
            result['error'] = self.error
        return result


@dataclass
class AggregateResponse:
    results: List[TargetResult]
    image_count: int
    transcode_errors: List[str] = field(default_factory=list)

    @property
    def all_failed(self) -> bool:
        return all(not r.success for r in self.results)

    def to_dict(self) -> Dict[str, Any]:
        body = {
            'message': 'Posts created',
            'responses': [r.to_dict() for r in self.results],
            'imageCount': self.image_count,
        }
        if self.transcode_errors:
            body['imageErrors'] = list(self.transcode_errors)
        return body
