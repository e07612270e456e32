"""Synthesis of the RFC 5988 style ``Link`` header for resource lists."""
import math
import re

from pydantic import BaseModel

from pmd_dx_api.params import Pagination

NULL_LINK = "null"

# Matches "page=N", "page=" and a bare "page", but not e.g. "pages=N"
_PAGE_PARAM = re.compile(r"([?&])page(?:=[^&#]*)?(?=[&#]|$)")


class PageLinks(BaseModel):
    next: str
    previous: str
    last: str

    def header(self) -> str:
        return (
            f'<{self.next}>; rel="next", '
            f'<{self.previous}>; rel="previous", '
            f'<{self.last}>; rel="last"'
        )


def last_page(total: int, per_page: int) -> int:
    # An empty table still has a first page to point at
    return max(math.ceil(total / per_page), 1)


def with_page(url: str, page: int) -> str:
    """Sets the page query parameter of url, appending it if absent."""
    if _PAGE_PARAM.search(url):
        return _PAGE_PARAM.sub(lambda m: f"{m.group(1)}page={page}", url)
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}page={page}"


def page_links(pagination: Pagination, total: int, request_url: str) -> PageLinks:
    """Derives next/previous/last URLs from the request URL.

    Pages beyond the last one get neither a next nor a previous link.
    """
    page = pagination.page
    last = last_page(total, pagination.per_page)

    next_url = with_page(request_url, page + 1)
    previous_url = with_page(request_url, page - 1)
    if page == 1 or page > last:
        previous_url = NULL_LINK
    if page >= last:
        next_url = NULL_LINK

    return PageLinks(next=next_url, previous=previous_url, last=with_page(request_url, last))
