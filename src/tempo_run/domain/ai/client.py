"""
Generative BPM fallback using an OpenAI-compatible chat completions API.

Used only when the lookup site has no tempo for a track. The model is asked
for a single JSON object and told to guess a plausible value when unsure.
"""

import json
import os
from typing import Any, Dict, Optional

import openai
from loguru import logger

from tempo_run.core.config import AIConfig


class AIError(Exception):
    """The generative fallback failed or returned an unusable answer."""

    pass


GUESS_BPM_MIN = 90
GUESS_BPM_MAX = 140


def get_api_key(config: AIConfig) -> Optional[str]:
    """Get the API key from config, falling back to environment variables."""
    return config.api_key or os.getenv("GROQ_API_KEY") or os.getenv("OPENAI_API_KEY")


def build_bpm_prompt(title: str, artist: str) -> str:
    """Build the prompt asking for a track's tempo as bare JSON."""
    return f"""You are an expert music analyst. Given the following song:
- Song Title: "{title}"
- Artist: "{artist}"

Please respond ONLY with a JSON object:
{{ "bpm": number }}

If unsure, guess a realistic BPM between {GUESS_BPM_MIN} and {GUESS_BPM_MAX}.
No explanation. Only output pure JSON."""


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Parse the first balanced {...} span in text as a JSON object.

    Braces inside JSON strings are ignored while balancing. Models often wrap
    the object in prose or markdown fences, so only the span is parsed.

    Returns:
        Parsed dict, or None if no balanced object parses
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for pos in range(start, len(text)):
            ch = text[pos]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    try:
                        parsed = json.loads(text[start : pos + 1])
                    except json.JSONDecodeError:
                        break
                    return parsed if isinstance(parsed, dict) else None
        else:
            # Unbalanced from here to the end
            return None
        start = text.find("{", start + 1)
    return None


def parse_bpm_response(content: str) -> float:
    """Extract a positive BPM from a model reply.

    Raises:
        AIError: If no JSON object is found or bpm is missing or not positive
    """
    parsed = extract_json_object(content or "")
    if parsed is None:
        raise AIError(f"No JSON object in AI response: {content!r}")

    bpm = parsed.get("bpm")
    if isinstance(bpm, bool) or not isinstance(bpm, (int, float)):
        raise AIError(f"AI response has no numeric bpm: {parsed!r}")
    if bpm <= 0:
        raise AIError(f"AI response bpm is not positive: {bpm}")
    return float(bpm)


def create_client(config: AIConfig) -> openai.OpenAI:
    """Create the chat client.

    The client's own retries are disabled; the enrichment pipeline owns the
    retry bound.

    Raises:
        AIError: If no API key is configured
    """
    api_key = get_api_key(config)
    if not api_key:
        raise AIError("No API key configured for the BPM fallback")

    return openai.OpenAI(
        api_key=api_key,
        base_url=config.base_url,
        timeout=config.request_timeout,
        max_retries=0,
    )


def request_bpm_guess(
    title: str,
    artist: str,
    config: AIConfig,
    client: Optional[openai.OpenAI] = None,
) -> float:
    """Single attempt at getting a BPM from the model.

    Args:
        title: Track title
        artist: Track artist
        config: AI configuration (model, endpoint)
        client: Optional pre-built client

    Returns:
        BPM value (> 0)

    Raises:
        AIError: On API errors or unusable responses
    """
    client = client or create_client(config)

    try:
        response = client.chat.completions.create(
            model=config.model,
            messages=[{"role": "user", "content": build_bpm_prompt(title, artist)}],
        )
    except openai.APIError as e:
        raise AIError(f"AI API error: {e}") from e

    if not response.choices:
        raise AIError("AI response has no choices")

    content = response.choices[0].message.content or ""
    bpm = parse_bpm_response(content)
    logger.debug(f"🤖 AI BPM guess for {title}: {bpm}")
    return bpm
