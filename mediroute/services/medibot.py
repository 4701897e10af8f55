"""
MediBot first-aid guidance proxy

Stateless pass-through to the hosted Gemini model. Any upstream failure
degrades to a fixed piece of advice instead of an error.
"""
import logging
from typing import Any, Dict, Optional
import requests
from mediroute.domain import config

logger = logging.getLogger(__name__)

EMPTY_QUESTION_REPLY = "Please describe the patient condition clearly."
FALLBACK_REPLY = "Keep airway open. Monitor breathing and rush to hospital."

PROMPT_TEMPLATE = (
    "You are MediBot, an ambulance emergency nurse.\n"
    "Give short, clear, step-by-step first-aid actions only.\n\n"
    "Patient case: {question}"
)

class MediBotClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None
    ):
        self.api_key = api_key if api_key is not None else config.GEMINI_API_KEY
        self.model = model or config.GEMINI_MODEL
        self.session = session or requests.Session()
        self.timeout = timeout or config.MEDIBOT_TIMEOUT

    def ask(self, question: str) -> str:
        if not question or not question.strip():
            return EMPTY_QUESTION_REPLY

        if not self.api_key:
            logger.warning("GEMINI_API_KEY not set, returning fallback advice")
            return FALLBACK_REPLY

        url = f"{config.GEMINI_BASE_URL}/models/{self.model}:generateContent"
        payload = {
            "contents": [
                {"role": "user", "parts": [{"text": PROMPT_TEMPLATE.format(question=question.strip())}]}
            ]
        }

        try:
            response = self.session.post(
                url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout
            )
            response.raise_for_status()
            reply = self._extract_text(response.json())
        except (requests.RequestException, ValueError) as e:
            logger.error(f"MediBot upstream error: {str(e)}")
            return FALLBACK_REPLY

        return reply or FALLBACK_REPLY

    def _extract_text(self, body: Dict[str, Any]) -> Optional[str]:
        try:
            parts = body["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            logger.warning("MediBot response had no candidates")
            return None
        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()
        return text or None
