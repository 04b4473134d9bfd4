from typing import Tuple


def normalize_paging(limit, offset, default_limit: int = 200, max_limit: int = 500) -> Tuple[int, int]:
    try:
        lim = int(limit)
    except (TypeError, ValueError):
        lim = default_limit
    else:
        lim = min(max(lim, 1), max_limit)
    try:
        off = max(int(offset), 0)
    except (TypeError, ValueError):
        off = 0
    return lim, off
