from .client import MixpostClient
from .models import (
    CreatePostRequest,
    MediaUpdateRequest,
    PostContent,
    PostVersion,
    TagRequest,
    TagUpdateRequest,
    UpdatePostRequest,
)

__all__ = [
    "MixpostClient",
    "CreatePostRequest",
    "MediaUpdateRequest",
    "PostContent",
    "PostVersion",
    "TagRequest",
    "TagUpdateRequest",
    "UpdatePostRequest",
]
