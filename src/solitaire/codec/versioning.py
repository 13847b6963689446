"""Format versioning for persisted histories and share codes."""

from typing import Set


class HistoryFormat:
    """Serialized history payload versions."""

    CURRENT = 1
    COMPATIBLE: Set[int] = {1}


class ShareCodeFormat:
    """Share-code header versions (byte 0 of the decoded buffer)."""

    CURRENT = 1
    COMPATIBLE: Set[int] = {1}


def validate_history_format(version: int) -> None:
    """Validate a persisted history's format version.

    Raises:
        ValueError: If the version is not compatible
    """
    if version not in HistoryFormat.COMPATIBLE:
        raise ValueError(
            f"Incompatible history format: {version}. "
            f"Compatible formats: {HistoryFormat.COMPATIBLE}"
        )


def validate_share_code_version(version: int) -> None:
    """Validate a share-code header version.

    Raises:
        ValueError: If the version is not compatible
    """
    if version not in ShareCodeFormat.COMPATIBLE:
        raise ValueError(
            f"Incompatible share code version: {version}. "
            f"Compatible versions: {ShareCodeFormat.COMPATIBLE}"
        )
