"""Page-by-page fetch loop shared by every list endpoint.

The forge never says "this is the last page"; a page shorter than per_page
(an empty one included) is the signal.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from prguard_core.errors import ForgeDataError

logger = logging.getLogger(__name__)

PER_PAGE = 100
MAX_FAILED_PAGES = 3


def fetch_all_pages(
    fetch_page: Callable[[int, int], Any],
    per_page: int = PER_PAGE,
    tolerate_failures: bool = False,
    pause: Callable[[int], None] | None = None,
    max_failed_pages: int = MAX_FAILED_PAGES,
) -> list:
    """Call fetch_page(page, per_page) for page 1, 2, ... and concatenate results.

    A page that is not a list (None on transport failure, or an error object)
    is fatal unless tolerate_failures is set. When tolerated the page counts
    as empty, the page number still advances and fetching continues, so some
    endpoints that fail on specific pages still give partial results. After
    max_failed_pages consecutive failures the loop gives up.

    pause(page) runs before every page after the first.
    """
    items: list = []
    page = 1
    failed_in_a_row = 0

    while True:
        if page > 1 and pause is not None:
            pause(page)

        result = fetch_page(page, per_page)

        if not isinstance(result, list):
            if not tolerate_failures:
                raise ForgeDataError(f"Expected a list for page {page}, got {type(result).__name__}", data=result)

            failed_in_a_row += 1
            logger.warning("Unable to fetch page %d from GitHub, returning partial results", page)
            page += 1
            if failed_in_a_row >= max_failed_pages:
                logger.warning("Giving up after %d failed pages in a row", failed_in_a_row)
                break
            continue

        failed_in_a_row = 0
        items.extend(result)
        page += 1

        if len(result) < per_page:
            break

    return items
