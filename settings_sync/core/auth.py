"""Token authentication for the GitHub Gist API."""

import os

from dotenv import load_dotenv

from .errors import Unauthenticated

DEFAULT_API_BASE_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "Cursor-Settings-Sync-Extension"


class GistAuth:
    """Resolves the GitHub token and builds request headers.

    The token is resolved in order: the explicit ``token`` argument, then
    ``GITHUB_TOKEN`` from the environment (a ``.env`` file is loaded first).
    Resolution is lazy so that read-only commands work without a token.
    """

    def __init__(
        self,
        token: str | None = None,
        username: str = "",
        base_url: str | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize authentication settings.

        Args:
            token: GitHub personal access token (or load from GITHUB_TOKEN env)
            username: GitHub account name the token is expected to belong to
            base_url: API base URL (or load from GITHUB_API_URL env)
            user_agent: Fixed client identifier sent with every request
        """
        load_dotenv()

        self._explicit_token = (token or "").strip()
        self.username = username
        self.base_url = (base_url or os.getenv("GITHUB_API_URL", DEFAULT_API_BASE_URL)).rstrip("/")
        self.user_agent = user_agent

    def resolve_token(self) -> str:
        """Return the first usable token of the resolution chain.

        Raises:
            Unauthenticated: If neither source provides a token
        """
        if self._explicit_token:
            return self._explicit_token

        env_token = os.getenv("GITHUB_TOKEN", "").strip()
        if env_token:
            return env_token

        raise Unauthenticated(
            "No GitHub authentication token found. Set `github.token` in the "
            "config file or the GITHUB_TOKEN environment variable."
        )

    def get_headers(self, token: str | None = None, with_body: bool = False) -> dict[str, str]:
        """Generate headers for an API request.

        Args:
            token: Use this token instead of resolving one
            with_body: Add a JSON Content-Type header

        Returns:
            Dictionary of headers including Authorization
        """
        headers = {
            "Authorization": f"token {token or self.resolve_token()}",
            "User-Agent": self.user_agent,
            "Accept": "application/vnd.github+json",
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    def get_full_url(self, path: str) -> str:
        """Build full URL from base URL and path."""
        return f"{self.base_url}{path}"

    def verify_credentials(self) -> bool:
        """Check that a token can be resolved (does not call the API)."""
        try:
            self.resolve_token()
        except Unauthenticated:
            return False
        return True
