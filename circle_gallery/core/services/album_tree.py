"""Helpers for the album tree and the breadcrumb path into it.

The client never holds the whole tree: only the breadcrumb (root to the open
album) and the albums of the currently open level. All checks here work with
that partial view.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from circle_gallery.core.models import Album


def path_ids(path: Sequence[Album]) -> list[str]:
    return [a.id for a in path]


def is_child_of_path_end(path: Sequence[Album], album: Album) -> bool:
    """Return True if `album` can be entered from the end of `path`.

    Albums without a recorded parent are accepted at any depth, since some
    listings omit `parentId`.
    """
    if album.parent_id is None:
        return True
    return bool(path) and path[-1].id == album.parent_id


def truncate_at(path: Sequence[Album], album_id: str) -> tuple[Album, ...]:
    """Drop `album_id` and everything below it from the path."""
    ids = path_ids(path)
    if album_id not in ids:
        return tuple(path)
    return tuple(path[: ids.index(album_id)])


def replace_in_path(path: Sequence[Album], album: Album) -> tuple[Album, ...]:
    return tuple(album if a.id == album.id else a for a in path)


def would_create_cycle(
    album_id: str,
    new_parent_id: str | None,
    path: Sequence[Album],
    current_level: Iterable[Album],
) -> bool:
    """Check whether re-parenting `album_id` under `new_parent_id` closes a loop.

    Detectable cases: parenting an album to itself, or to one of its own
    descendants when the album is on the breadcrumb (everything after it on
    the path and the open level are then known descendants).

    Args:
        album_id: Album being moved.
        new_parent_id: Target parent, None for the scope root.
        path: Current breadcrumb, root first.
        current_level: Albums listed at the open level.
    """
    if new_parent_id is None:
        return False
    if new_parent_id == album_id:
        return True
    ids = path_ids(path)
    if album_id not in ids:
        return False
    descendants = set(ids[ids.index(album_id) + 1 :])
    descendants.update(a.id for a in current_level)
    return new_parent_id in descendants
