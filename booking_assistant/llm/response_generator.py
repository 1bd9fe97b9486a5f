# Role: Gemini-backed natural-language reply generator. Exposes the narrow generate_reply(...) contract the
# ReplyOrchestrator depends on, builds system + turn prompts, and cleans common "assistant preamble" artifacts.

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

import booking_assistant.config as config
from booking_assistant.core.reply_orchestrator import ReplyGenerator
from booking_assistant.llm.gemini_client import GeminiClient
from booking_assistant.models.mode import Mode
from booking_assistant.prompts.reply_prompt import build_reply_prompt
from booking_assistant.prompts.system_prompt import build_system_prompt

# In-band completion flag the model may echo back; completion is decided by the flow controller, so it is stripped.
_READY_MARKER = "BOOKING_READY_FOR_SUBMISSION"


class GeminiReplyGenerator(ReplyGenerator):
    def __init__(self, client: Optional[GeminiClient] = None) -> None:
        self.client = client or GeminiClient()

    def _clean_llm_output(self, text: str) -> str:
        # Role: remove common filler/preambles and leaked markers without changing actual content.
        if not text:
            return text

        text = text.replace(_READY_MARKER, "")
        text = re.sub(r"```(?:json)?.*?```", "", text, flags=re.DOTALL)

        lines = [ln.rstrip() for ln in text.strip().splitlines()]

        always_drop_prefixes = (
            "the user",
            "the customer wants",
            "my plan",
            "i will now",
            "here's my reply",
            "here is my reply",
            "assistant:",
        )
        soft_drop_prefixes = ("okay", "ok", "sure", "alright", "got it")

        cleaned: list[str] = []
        skipping = True

        for ln in lines:
            low = ln.strip().lower()
            low_norm = low.rstrip(":,.-! ")

            if skipping:
                if not low_norm:
                    continue

                if any(low_norm.startswith(p) for p in always_drop_prefixes):
                    continue

                # Key line: only drop a bare "Okay." line, never a real sentence starting with "Sure, ...".
                if low_norm in soft_drop_prefixes:
                    continue

            skipping = False
            cleaned.append(ln)

        out = "\n".join(cleaned).strip()
        return out if out else text.strip()

    def generate_reply(
        self,
        user_message: str,
        extracted_data: Dict[str, Any],
        missing_fields: List[str],
        mode: Mode,
        recent_messages: Optional[List[Dict[str, str]]] = None,
    ) -> str:
        # 1) Build system + turn prompts (mode policy, known fields, missing fields, contact details)
        # 2) Call the LLM
        # 3) Clean output; an empty result is an error (orchestrator falls back)
        prompt = build_reply_prompt(
            user_message=user_message,
            extracted_data=extracted_data,
            missing_fields=missing_fields,
            mode=mode,
            contact_phone=config.CONTACT_PHONE,
            contact_email=config.CONTACT_EMAIL,
            recent_messages=recent_messages,
        )

        if config.DEBUG:
            print("\n--- REPLY GENERATOR ---")
            print("MODE:", mode)
            print("EXTRACTED:", extracted_data)
            print("MISSING:", missing_fields)
            print("-----------------------")

        response = self.client.generate_text(prompt, system_instruction=build_system_prompt())

        if config.DEBUG:
            raw_preview = (response or "").strip()
            print(
                "RAW RESPONSE (preview):\n",
                raw_preview[:600] + ("..." if len(raw_preview) > 600 else ""),
            )

        response = self._clean_llm_output(response or "")
        if not response:
            raise RuntimeError("Reply generator produced an empty message.")

        if config.DEBUG:
            print("CLEANED RESPONSE:\n", response)
            print("-----------------------\n")

        return response
