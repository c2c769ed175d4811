"""AI domain - generative BPM fallback via an OpenAI-compatible API."""

from .client import (
    AIError,
    build_bpm_prompt,
    create_client,
    extract_json_object,
    get_api_key,
    parse_bpm_response,
    request_bpm_guess,
)

__all__ = [
    "AIError",
    "build_bpm_prompt",
    "create_client",
    "extract_json_object",
    "get_api_key",
    "parse_bpm_response",
    "request_bpm_guess",
]
