"""HTTP client wrapper for the GitHub API."""

import logging
from typing import Any

import requests

from .auth import GistAuth
from .errors import NotFound, RemoteError


class GistClient:
    """Makes authenticated JSON requests against the GitHub REST API."""

    def __init__(
        self,
        auth: GistAuth | None = None,
        timeout: float = 30,
        session: requests.Session | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize client with authentication.

        Args:
            auth: GistAuth instance (creates one from env if not provided)
            timeout: Per-request timeout in seconds
            session: Optional requests session (created if not provided)
            logger: Logger to report requests to
        """
        self.auth = auth or GistAuth()
        self.timeout = timeout
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    def _send(self, method: str, url: str, headers: dict[str, str], **kwargs: Any) -> requests.Response:
        """Send a request and map failures to RemoteError."""
        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise RemoteError(f"Request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            error_msg = f"GitHub API error {response.status_code}: {response.text[:500]}"
            if response.status_code == 404:
                raise NotFound(error_msg, response.status_code, response.text)
            raise RemoteError(error_msg, response.status_code, response.text)
        return response

    def request(
        self,
        method: str,
        path: str,
        json_data: dict[str, Any] | None = None,
        query_params: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        """Make an authenticated request to the API.

        Args:
            method: HTTP method
            path: API path (without base URL)
            json_data: Optional JSON body data
            query_params: Optional query parameters
            token: Use this token instead of the resolved one

        Returns:
            Parsed JSON response, the raw text if the body is not JSON, or
            None for empty responses

        Raises:
            Unauthenticated: If no token can be resolved
            NotFound: On 404 responses
            RemoteError: On other API errors and transport failures
        """
        headers = self.auth.get_headers(token=token, with_body=json_data is not None)
        url = self.auth.get_full_url(path)

        self.logger.debug("%s %s", method, path)
        response = self._send(method, url, headers, params=query_params, json=json_data)

        # Handle empty responses (e.g. 204 on delete)
        if not response.content:
            return None

        try:
            return response.json()
        except ValueError:
            return response.text

    def get(self, path: str, query_params: dict[str, Any] | None = None) -> Any:
        """Make a GET request."""
        return self.request("GET", path, query_params=query_params)

    def post(self, path: str, json_data: dict[str, Any]) -> Any:
        """Make a POST request."""
        return self.request("POST", path, json_data=json_data)

    def patch(self, path: str, json_data: dict[str, Any]) -> Any:
        """Make a PATCH request."""
        return self.request("PATCH", path, json_data=json_data)

    def delete(self, path: str) -> Any:
        """Make a DELETE request."""
        return self.request("DELETE", path)

    def get_raw(self, url: str) -> str:
        """Download the full content of a file from its raw URL.

        Used for gist files the API returns truncated.
        """
        self.logger.debug("GET %s", url)
        response = self._send("GET", url, self.auth.get_headers())
        return response.content.decode("utf-8")
