from typing import List, Dict, Any, Optional
import logging
import httpx
from ..config import settings
from ..core.errors import GenerationFailure

logger = logging.getLogger("persona.llm")

EMPTY_ANSWER = "Sorry, I couldn't generate a response."


class LLMClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key or settings.openai_api_key.get_secret_value()
        self.model = model or settings.openai_model
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout

    async def generate(
        self,
        messages: List[Dict[str, Any]],
        temperature: float = 0.5,
    ) -> str:
        """
        Returns the trimmed assistant text for an already assembled message
        sequence. Raises GenerationFailure on transport or HTTP errors.
        """
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("Chat completion returned %s", exc.response.status_code)
            raise GenerationFailure(
                f"Chat completion failed: HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Chat completion request failed (%s): %s", type(exc).__name__, exc)
            raise GenerationFailure(
                f"Chat completion failed: {type(exc).__name__}"
            ) from exc

        data = resp.json()
        try:
            content = data["choices"][0]["message"].get("content")
        except (KeyError, IndexError, TypeError, AttributeError):
            content = None

        return (content or "").strip() or EMPTY_ANSWER
