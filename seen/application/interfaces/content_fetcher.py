"""Abstract interface (port) for retrieving a URL's raw content."""

from abc import ABC, abstractmethod

from seen.domain.entities import FetchedContent


class ContentFetcher(ABC):
    """Port for single-page content retrieval — implemented in the infrastructure layer."""

    @abstractmethod
    async def fetch(self, url: str) -> FetchedContent:
        """Retrieve the bytes and content type behind a URL.

        Raises:
            FetchError: on timeout, oversize body, non-2xx status or
                unsupported scheme. Nothing is returned partially.
        """
        ...
