"""Maximum movable stack size for FreeCell-style supermoves."""


def max_movable(empty_aux_cells: int, empty_columns: int) -> int:
    """Maximum cards movable as one unit.

    max = (empty_aux_cells + 1) * 2 ** empty_columns

    Args:
        empty_aux_cells: Empty free cells not consumed by the move itself
        empty_columns: Empty tableau columns, excluding source and destination

    Raises:
        ValueError: If either count is negative
    """
    if empty_aux_cells < 0 or empty_columns < 0:
        raise ValueError(
            f"Counts must be non-negative, got cells={empty_aux_cells} columns={empty_columns}"
        )
    return (empty_aux_cells + 1) * 2 ** empty_columns
