import json
import logging
import re
from dataclasses import dataclass

from anthropic import AsyncAnthropic

from app.exceptions.custom import GenerationError

logger = logging.getLogger(__name__)

MODEL = "claude-sonnet-4-20250514"

_JSON_RE = re.compile(r"\{[^{}]*\}")


@dataclass(frozen=True)
class GenerationResult:
    payload: dict
    input_tokens: int = 0
    output_tokens: int = 0


class ClaudeService:
    def __init__(self, api_key: str, model: str = MODEL):
        self._client = AsyncAnthropic(api_key=api_key)
        self.model = model

    async def generate_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 400,
    ) -> GenerationResult:
        """Run one completion and return its JSON object payload.

        Raises GenerationError when the API call fails or the reply holds no
        JSON object.
        """
        try:
            response = await self._client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
            text = response.content[0].text
        except Exception as exc:
            logger.warning("Claude API call failed: %s", exc)
            raise GenerationError(str(exc), reason="api_error") from exc

        payload = self._try_parse_json(text)
        if payload is None:
            raise GenerationError(f"No JSON object in reply: {text[:200]!r}", reason="unparseable")

        usage = getattr(response, "usage", None)
        return GenerationResult(
            payload=payload,
            input_tokens=getattr(usage, "input_tokens", 0) or 0,
            output_tokens=getattr(usage, "output_tokens", 0) or 0,
        )

    @staticmethod
    def _try_parse_json(text: str) -> dict | None:
        # Strip markdown fences
        stripped = re.sub(r"```(?:json)?\s*", "", text).strip().rstrip("`")

        # Try direct parse
        try:
            obj = json.loads(stripped)
            if isinstance(obj, dict):
                return obj
        except (json.JSONDecodeError, ValueError):
            pass

        # Fallback: find JSON object in the text
        match = _JSON_RE.search(text)
        if match:
            try:
                return json.loads(match.group(0))
            except (json.JSONDecodeError, ValueError):
                pass

        return None
