# Role: Thin Gemini adapter for the booking assistant. Owns credentials, model choice and generation limits,
# and turns every SDK failure into RuntimeError so the reply orchestrator has one thing to catch.

import os
from typing import Any, Dict, Optional

from google import genai


class GeminiClient:
    DEFAULT_MODEL = "gemini-2.0-flash"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: float = 0.4,
        max_output_tokens: int = 400,
    ) -> None:
        # Key line: secrets come from env only; a missing key is a startup error the caller can handle.
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not self.api_key:
            raise RuntimeError("Missing GEMINI_API_KEY in environment or .env")

        self.model_name = model or os.getenv("GEMINI_MODEL", self.DEFAULT_MODEL)
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

        self.client = genai.Client(api_key=self.api_key)

    def _generation_config(self, system_instruction: Optional[str]) -> Dict[str, Any]:
        cfg: Dict[str, Any] = {
            "temperature": self.temperature,
            "max_output_tokens": self.max_output_tokens,
        }
        if system_instruction:
            cfg["system_instruction"] = system_instruction
        return cfg

    def generate_text(self, prompt: str, system_instruction: Optional[str] = None) -> str:
        # 1) Reject empty prompts before spending a request
        # 2) One completion call with the system instruction kept separate from the turn prompt
        # 3) An empty candidate counts as a failure (caller falls back to deterministic text)
        if not prompt or not prompt.strip():
            raise ValueError("Prompt must be non-empty.")

        try:
            resp = self.client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=self._generation_config(system_instruction),
            )
        except Exception as e:
            raise RuntimeError(f"Gemini API call failed: {e}") from e

        text = getattr(resp, "text", None)
        if not text or not text.strip():
            raise RuntimeError("Gemini returned an empty response.")

        return text.strip()
