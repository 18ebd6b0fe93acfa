"""Reserved Windows device names.

Windows intercepts these names at the filesystem-API level, regardless of
the directory they appear in, so a file carrying one of them cannot be
opened or deleted through an ordinary path.
"""

RESERVED_NAMES: frozenset[str] = frozenset(
    {
        "CON",
        "PRN",
        "AUX",
        "NUL",
        *(f"COM{i}" for i in range(1, 10)),
        *(f"LPT{i}" for i in range(1, 10)),
    }
)


def is_reserved_name(name: str) -> bool:
    """Check if a file name is exactly a reserved device name.

    The comparison is case-insensitive and performs no other normalization:
    ``nul.txt`` and ``null`` are not reserved, ``Nul`` is.

    Args:
        name: Base name of a file (no directory component).

    Returns:
        True if the upper-cased name is one of the 22 reserved names.
    """
    return name.upper() in RESERVED_NAMES
