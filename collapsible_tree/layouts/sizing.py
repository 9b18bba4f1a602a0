"""Responsive spacing between hierarchy levels."""

# Shorter links push labels offscreen or on top of each other
MIN_LINK_LENGTH = 175


def compute_link_length(available_width: float, depth_count: int) -> float:
    """Spacing between levels derived from the drawable width.

    Parameters
    ----------
    available_width : float
        Canvas width with the left and right margins removed.
    depth_count : int
        Number of levels below the root (the length of the hierarchy labels).

    Returns
    -------
    float
        ``2 * available_width / depth_count``, floored at ``MIN_LINK_LENGTH``.
    """
    depth_count = max(depth_count, 1)
    return max(MIN_LINK_LENGTH, 2 * (available_width / depth_count))
