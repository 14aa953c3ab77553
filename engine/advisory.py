"""
Advisory text collaborator.

The simulator hands an external text-generation service a snapshot of the
eight inputs and shows whatever comes back verbatim. Providers implement
:class:`AdvisoryProvider`; :func:`request_advisory` is the only entry point
callers use and it never raises.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from google import genai

from models.simulation import InputVector

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

EMPTY_RESPONSE_MESSAGE = "The analysis result could not be retrieved."
FAILURE_MESSAGE = "An error occurred during the AI analysis. Please try again shortly."

PROMPT_TEMPLATE = """
You are a leading macroeconomist and a veteran fund manager.
The economic simulator is currently set to the following values:

1. Policy rate change: {interestRate}%p
2. Inflation change: {inflation}%
3. Exchange rate (local/USD) change: {exchangeRate}%
4. Oil price change: {oilPrice}%
5. Export change: {exportChange}%
6. Consumer sentiment: {consumptionChange}%
7. Unemployment rate change: {unemploymentRate}%p
8. Employment index change: {employmentIndex}

Based on these figures, explain the following so that a beginner can follow:

1. [Economic scenario analysis]: Diagnose the economic situation these variables produce together (boom, recession, stagflation, ...) and walk through the chain reactions.
2. [Portfolio advice]: Recommend the three most promising asset classes right now (e.g. bonds, growth/value/dividend stocks, gold, dollars, real estate, deposits) and name the assets whose weight should be reduced, with clear reasoning.

Tone: friendly, professional and insightful. Use plain prose with numbered lists and no markdown. Emphasize the key points.
"""


def format_signed(value: float) -> str:
    if float(value).is_integer():
        text = str(int(value))
    else:
        text = repr(float(value))
    return f"+{text}" if value > 0 else text


def build_prompt(inputs: InputVector) -> str:
    snapshot = {k: format_signed(v) for k, v in inputs.to_dict().items()}
    return PROMPT_TEMPLATE.format(**snapshot)


class AdvisoryProvider(ABC):
    @abstractmethod
    async def generate_advisory(self, snapshot: Dict[str, float]) -> str:
        """Returns narrative text for a snapshot keyed by wire names."""


class GeminiAdvisoryProvider(AdvisoryProvider):
    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, client: Any = None):
        self.model = model or os.getenv("ADVISORY_MODEL", DEFAULT_MODEL)
        self._api_key = api_key
        self._client = client

    @property
    def client(self) -> Any:
        # created on first use so a missing key surfaces as an advisory failure
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key or os.getenv("GEMINI_API_KEY"))
        return self._client

    async def generate_advisory(self, snapshot: Dict[str, float]) -> str:
        prompt = build_prompt(InputVector.from_dict(snapshot))
        response = await self.client.aio.models.generate_content(model=self.model, contents=prompt)
        return response.text or ""


async def request_advisory(provider: AdvisoryProvider, inputs: InputVector) -> str:
    try:
        text = await provider.generate_advisory(inputs.to_dict())
    except Exception:
        logger.exception("Advisory request failed")
        return FAILURE_MESSAGE
    if not isinstance(text, str) or not text.strip():
        logger.warning("Advisory provider returned an empty response")
        return EMPTY_RESPONSE_MESSAGE
    return text
