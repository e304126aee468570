"""
DeepSeek chat-completions client used to draft AI annotation text.
"""

import logging
from typing import Any, Dict, Optional

import requests

from .errors import AIServiceError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "deepseek-chat"


class DeepSeekClient:
    """
    Thin client around the chat-completions endpoint: a prompt goes in,
    the first choice's message content comes out.
    """

    def __init__(self, api_key: str, base_url: str = "https://api.deepseek.com",
                 model: str = None, timeout: int = 120):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def complete(self, prompt: str, model: Optional[str] = None) -> Dict[str, Any]:
        """
        Send a single-turn prompt.

        Returns:
            Dictionary with 'content' and 'usage'

        Raises:
            AIServiceError: missing key (500) or upstream failure (503)
        """
        if not self.api_key:
            raise AIServiceError("DeepSeek API key not configured", status_code=500)

        model_name = self.model or model or DEFAULT_MODEL
        payload = {
            "model": model_name,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.7,
            "max_tokens": 4000,
            "stream": False,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

        logger.info("[ai_client] Requesting completion: model=%s, prompt_length=%d",
                    model_name, len(prompt))

        try:
            response = requests.post(self.endpoint, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error("[ai_client] Request to %s failed: %s", self.endpoint, e)
            raise AIServiceError("Failed to connect to DeepSeek API", details=str(e)) from e

        if not response.ok:
            logger.error("[ai_client] DeepSeek returned %d: %s", response.status_code, response.text[:500])
            raise AIServiceError(
                "Failed to connect to DeepSeek API",
                details={"status": response.status_code, "response": response.text[:500]},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise AIServiceError("Failed to parse response from DeepSeek API",
                                 status_code=500, details=str(e)) from e

        choices = data.get("choices") or []
        if choices and isinstance(choices[0], dict) and choices[0].get("message"):
            return {
                "content": choices[0]["message"].get("content", ""),
                "usage": data.get("usage"),
            }

        logger.error("[ai_client] Unexpected response body: %s", str(data)[:500])
        raise AIServiceError("DeepSeek API returned an error", details=data.get("error"))
