"""HEAD-request probe for the published Pages site."""

from __future__ import annotations

import httpx

from .logging import get_logger

logger = get_logger("reachability")


class SiteChecker:
    """Checks whether a published URL answers a HEAD request with a 2xx status."""

    USER_AGENT = "pagesdoctor (+https://docs.github.com/pages)"

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._http = httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": self.USER_AGENT},
            transport=transport,
        )

    def is_reachable(self, url: str) -> bool:
        try:
            response = self._http.head(url)
        except httpx.HTTPError as exc:
            logger.debug("HEAD %s failed: %s", url, exc)
            return False
        logger.debug("HEAD %s -> %s", url, response.status_code)
        return response.is_success

    def close(self) -> None:
        self._http.close()


__all__ = ["SiteChecker"]
