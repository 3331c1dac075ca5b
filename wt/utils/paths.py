"""Path helpers."""

import os


def contains_path(root: str, path: str) -> bool:
    """
    Check whether path is root itself or lies inside it.

    Compares whole path components, so a worktree at ``.../foo`` does not
    claim a sibling directory ``.../foo-extra``.

    Args:
        root: Directory that may contain path
        path: Path to test

    Returns:
        True if path equals root or is below it
    """
    if not root or not path:
        return False
    root = os.path.normpath(root)
    path = os.path.normpath(path)
    if path == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(prefix)
