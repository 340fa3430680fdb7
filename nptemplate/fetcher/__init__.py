# SPDX-FileCopyrightText: 2025 Science Live Platform contributors
#
# SPDX-License-Identifier: GPL-3.0-or-later

from __future__ import annotations

from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3 import Retry

from nptemplate.config import Config
from nptemplate.errors import FetcherError, NotFound, NotOverriddenError, ProtocolError
from nptemplate.log import get_child_logger

TRIG_MEDIA_TYPE = "application/trig"
log = get_child_logger("fetcher")


class Fetcher:
    """Interface for reading remote documents."""

    def fetch(self, url: str) -> str:
        """Fetch a TriG document.

        Args:
            url (str): Where to fetch the document from.

        Raises:
            FetcherError: If the document could not be fetched.
            ProtocolError: If the content is not TriG.

        Returns:
            str: The TriG text.
        """
        raise NotOverriddenError()

    def fetch_json(self, url: str, params: dict[str, str] | None = None,
                   headers: dict[str, str] | None = None) -> Any:
        """Fetch and decode a JSON document."""
        raise NotOverriddenError()


class RdfFetcher(Fetcher):
    """Fetches documents over HTTP(S).

    Requests failing with one of the `RETRY_CODES` or a network error
    are retried as configured, anything else fails right away.
    """
    RETRY_CODES = [429, 500, 502, 503, 504]

    def __init__(self, config: Config) -> None:
        self._timeout = config.fetcher.timeout

        retry = Retry(
            total=config.fetcher.retries,
            backoff_factor=0.5,
            status_forcelist=self.RETRY_CODES,
            raise_on_status=False,
        )

        self._session = requests.Session()
        adapter = HTTPAdapter(max_retries=retry)
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)
        self._session.headers.update({
            "User-Agent": config.user_agent,
        })

    def _get(self, url: str, **kwargs: Any) -> requests.Response:
        log.debug("fetching '%s'", url)
        try:
            response = self._session.get(url, timeout=self._timeout, **kwargs)
        except requests.RequestException as err:
            raise FetcherError(f"failed to fetch '{url}': {err}") from err
        match response.status_code:
            case 200:
                pass
            case 404:
                raise NotFound(f"'{url}' does not exist (HTTP status code 404)")
            case _:
                raise FetcherError(f"failed to fetch '{url}', HTTP status code {response.status_code}")
        return response

    def fetch(self, url: str) -> str:
        response = self._get(url, headers={"Accept": TRIG_MEDIA_TYPE})
        content_type = response.headers.get("Content-Type", "").split(";")[0].strip()
        if content_type != TRIG_MEDIA_TYPE:
            raise ProtocolError(f"expected content-type '{TRIG_MEDIA_TYPE}' from '{url}', got: '{content_type}'")
        return response.text

    def fetch_json(self, url: str, params: dict[str, str] | None = None,
                   headers: dict[str, str] | None = None) -> Any:
        response = self._get(url, params=params, headers={"Accept": "application/json", **(headers or {})})
        try:
            return response.json()
        except ValueError as err:
            raise FetcherError(f"invalid JSON from '{url}': {err}") from err
