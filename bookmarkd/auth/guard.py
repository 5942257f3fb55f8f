"""Identity predicates shared by every resolver.

Role checks (owner, moderator, member) live in ``bookmarkd.services.membership``;
these functions only compare the viewer against a subject id.
"""

from __future__ import annotations

from typing import Optional

from bookmarkd.auth.context import Viewer
from bookmarkd.exceptions import Forbidden, Unauthenticated


def require_viewer(viewer: Optional[Viewer]) -> Viewer:
    if viewer is None:
        raise Unauthenticated()
    return viewer


def require_viewer_is(viewer: Optional[Viewer], subject_id: int) -> Viewer:
    viewer = require_viewer(viewer)
    if viewer.id != subject_id:
        raise Forbidden()
    return viewer


def viewer_is(viewer: Optional[Viewer], subject_id: Optional[int]) -> bool:
    """Non-raising variant used for per-viewer personalisation."""
    return viewer is not None and subject_id is not None and viewer.id == subject_id
