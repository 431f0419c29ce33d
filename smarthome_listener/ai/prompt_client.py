"""HTTP client for the remote assistant.

Sends recognised command text to the assistant's prompt endpoint and
returns its textual reply.
"""

import requests

from smarthome_listener.exceptions import ConfigError, PromptError
from smarthome_listener.utils.logging import get_logger

log = get_logger("ai.prompt_client")

PROMPT_ENDPOINT = "/get_prompt_response"


class HttpPromptClient:
    """Prompt client talking to the assistant over HTTP.

    Args:
        api_host: Base URL of the assistant service (e.g. "http://localhost:8000").
        timeout: Seconds to wait for a reply.
        session: Optional requests session (shared connection pool).

    Raises:
        ConfigError: If ``api_host`` is empty.
    """

    def __init__(
        self,
        api_host: str,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        if not api_host:
            raise ConfigError("missing parameter: api_host")
        self.api_host = api_host.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def send_prompt(self, prompt: str) -> str:
        """Send one prompt and return the assistant's reply.

        Args:
            prompt: Command text.

        Returns:
            Response body as text.

        Raises:
            PromptError: On connection errors, timeouts or non-2xx responses.
        """
        url = f"{self.api_host}{PROMPT_ENDPOINT}"
        log.info("Sending prompt: %s", prompt[:80])

        try:
            response = self._session.get(url, params={"prompt": prompt}, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise PromptError(f"Prompt request failed: {e}") from e

        return response.text

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self._session.close()
