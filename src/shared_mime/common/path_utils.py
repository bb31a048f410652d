"""Path utilities for consistent file name handling."""

import unicodedata
from pathlib import Path, PurePath


def normalize_file_name(path: Path | str) -> str:
    """
    Reduce a path to the NFC-normalized base name used for glob matching.

    Globs only ever apply to the last path component. NFC normalization
    makes decomposed names (as produced by some filesystems) match
    patterns written in composed form.

    Args:
        path: Path object or string; may be a bare file name

    Returns:
        Base name with Unicode NFC normalization applied

    Examples:
        >>> normalize_file_name("/home/user/résumé.TXT")
        'résumé.TXT'
        >>> normalize_file_name(r"C:\\Users\\test\\photo.jpg")
        'photo.jpg'
    """
    path_str = str(path).replace('\\', '/')
    name = PurePath(path_str).name if '/' in path_str else path_str

    return unicodedata.normalize('NFC', name)
