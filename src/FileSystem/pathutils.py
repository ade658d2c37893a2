"""
Path normalization for tree-relative paths.

Every adapter keys its entries by the canonical form produced here:
forward slashes, no '.' or '..' segments, no repeated or leading separators.
The root is the empty string.
"""

from typing import List

ROOT = ""


def normalize_path(path: str) -> str:
    """
    Canonicalize a user-supplied path.

    '..' segments that would climb above the root are dropped, so the root is
    its own parent ("../a" and "/../a" both become "a"). Never raises.

    Args:
        path: Any path string; backslashes are treated as separators

    Returns:
        The canonical tree-relative path, ROOT for "", ".", "/" and similar
    """
    if not path:
        return ROOT
    parts: List[str] = []
    for segment in path.replace("\\", "/").split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if parts:
                parts.pop()
            continue
        parts.append(segment)
    return "/".join(parts)


def split_path(path: str) -> List[str]:
    """Return the segments of a path after normalization; [] for the root."""
    normalized = normalize_path(path)
    return normalized.split("/") if normalized else []


def parent_path(path: str) -> str:
    """Return the normalized parent of a path; the root is its own parent."""
    normalized = normalize_path(path)
    head, _, _ = normalized.rpartition("/")
    return head


def base_name(path: str) -> str:
    """Return the last segment of a normalized path, ROOT for the root."""
    return normalize_path(path).rpartition("/")[2]


def join_path(*parts: str) -> str:
    """Join path fragments and normalize the result."""
    return normalize_path("/".join(part for part in parts if part))


def is_root(path: str) -> bool:
    return normalize_path(path) == ROOT


def is_within(path: str, ancestor: str) -> bool:
    """True when path equals ancestor or lies inside its subtree."""
    path, ancestor = normalize_path(path), normalize_path(ancestor)
    if ancestor == ROOT:
        return True
    return path == ancestor or path.startswith(ancestor + "/")
