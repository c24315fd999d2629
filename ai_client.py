"""
ai_client.py
Thin wrapper around the hosted AI providers used by the lesson planners.
Every generator sends a prompt plus a JSON schema hint and gets a parsed
JSON object back.
"""

import json
import logging
import os
import re

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = os.environ.get("AI_PROVIDER", "anthropic")
ANTHROPIC_MODEL = os.environ.get("ANTHROPIC_MODEL", "claude-sonnet-4-5-20250929")
OPENAI_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-pro")
GEMINI_FAST_MODEL = os.environ.get("GEMINI_FAST_MODEL", "gemini-2.5-flash")
MAX_TOKENS = int(os.environ.get("AI_MAX_TOKENS", "8192"))

PROVIDER_KEY_ENV = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
}

# Educational content (history, health, biology) trips the default filters.
SAFETY_SETTINGS = {
    "HARM_CATEGORY_HARASSMENT": "BLOCK_NONE",
    "HARM_CATEGORY_HATE_SPEECH": "BLOCK_NONE",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT": "BLOCK_NONE",
    "HARM_CATEGORY_DANGEROUS_CONTENT": "BLOCK_NONE",
}

EFFICIENT_SYSTEM_INSTRUCTION = (
    "You are an expert educational content creator. Be efficient and generate "
    "the JSON output directly without any extra conversation or explanation."
)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$")


class AIServiceError(Exception):
    """The provider call itself failed (network, auth, quota...)."""


class AIResponseError(Exception):
    """The provider answered, but the reply cannot be used."""


def resolve_api_key(provider, api_key=""):
    """Request key first, then the provider's environment variable."""
    if api_key:
        return api_key
    env_name = PROVIDER_KEY_ENV.get(provider, "")
    return os.environ.get(env_name, "") if env_name else ""


def parse_json_response(text):
    """Parse an AI reply that may be wrapped in ```json fences."""
    if not text or not text.strip():
        raise AIResponseError("AI returned no text content to parse.")
    sanitized = _FENCE_RE.sub("", text.strip())
    try:
        return json.loads(sanitized)
    except ValueError:
        logger.error("Failed to parse sanitized JSON: %s", sanitized[:2000])
        raise AIResponseError("AI returned a malformed JSON response.")


def friendly_error_message(exc):
    """Turn a provider exception into text a teacher can act on."""
    message = str(exc) if exc else ""
    if isinstance(exc, AIResponseError):
        return f"AI Error: {message}"
    lower = message.lower()
    if "api key not valid" in lower or "api_key_invalid" in lower or "invalid x-api-key" in lower \
            or "incorrect api key" in lower:
        return "AI Error: The API key configured on the server is invalid."
    if "quota" in lower or "rate limit" in lower:
        return "AI Error: API quota exceeded. Please check your billing details."
    if "timeout" in lower or "timed out" in lower:
        return "AI Error: The request timed out. The task may be too complex. Please try simplifying it."
    if message:
        return f"AI Error: {message}"
    return ("An AI feature failed. Please try again. If the problem persists, "
            "check your connection or the server logs.")


def _schema_hint(schema):
    return (
        "\n\nReturn ONLY a raw JSON value (no markdown, no explanation) that "
        "conforms to this JSON schema:\n" + json.dumps(schema, indent=1)
    )


def _call_anthropic(prompt, schema, system_instruction, api_key, fast=False):
    import anthropic
    client = anthropic.Anthropic(api_key=api_key)
    msg = client.messages.create(
        model=ANTHROPIC_MODEL,
        max_tokens=MAX_TOKENS,
        system=system_instruction or EFFICIENT_SYSTEM_INSTRUCTION,
        messages=[{"role": "user", "content": prompt + (_schema_hint(schema) if schema else "")}],
    )
    return msg.content[0].text


def _call_openai(prompt, schema, system_instruction, api_key, fast=False):
    from openai import OpenAI
    client = OpenAI(api_key=api_key)
    kwargs = {}
    # json_object mode only accepts objects at the top level
    if schema and schema.get("type") == "OBJECT":
        kwargs["response_format"] = {"type": "json_object"}
    resp = client.chat.completions.create(
        model=OPENAI_MODEL,
        max_tokens=MAX_TOKENS,
        messages=[
            {"role": "system", "content": system_instruction or EFFICIENT_SYSTEM_INSTRUCTION},
            {"role": "user", "content": prompt + (_schema_hint(schema) if schema else "")},
        ],
        **kwargs,
    )
    return resp.choices[0].message.content


def _call_gemini(prompt, schema, system_instruction, api_key, fast=False):
    import google.generativeai as genai
    genai.configure(api_key=api_key)
    model = genai.GenerativeModel(
        GEMINI_FAST_MODEL if fast else GEMINI_MODEL,
        system_instruction=system_instruction or EFFICIENT_SYSTEM_INSTRUCTION,
        safety_settings=SAFETY_SETTINGS,
    )
    generation_config = {"response_mime_type": "application/json"}
    if schema:
        generation_config["response_schema"] = schema
    response = model.generate_content(prompt, generation_config=generation_config)
    return response.text


_PROVIDERS = {
    "anthropic": _call_anthropic,
    "openai": _call_openai,
    "gemini": _call_gemini,
}


def generate_text(prompt, schema=None, system_instruction="", provider=None,
                  api_key="", fast=False):
    """Send one prompt and return the raw reply text."""
    provider = provider or DEFAULT_PROVIDER
    call = _PROVIDERS.get(provider)
    if call is None:
        raise AIServiceError(f"Unknown AI provider: {provider}")
    key = resolve_api_key(provider, api_key)
    if not key:
        raise AIServiceError(f"No API key configured for provider '{provider}'.")

    logger.info("Calling %s (fast=%s, prompt %d chars)", provider, fast, len(prompt))
    try:
        return call(prompt, schema, system_instruction, key, fast=fast)
    except ImportError as e:
        raise AIServiceError(f"{provider} SDK is not installed: {e}")
    except Exception as e:
        logger.exception("AI call to %s failed", provider)
        raise AIServiceError(str(e)) from e


def generate_json(prompt, schema=None, system_instruction="", provider=None,
                  api_key="", fast=False):
    """Send one prompt and return the parsed JSON reply."""
    text = generate_text(prompt, schema, system_instruction, provider, api_key, fast)
    return parse_json_response(text)


def check_api_status(provider=None, api_key=""):
    """Small round-trip used by the status badge on the planner page."""
    try:
        generate_text("Reply with the single word: ok", provider=provider,
                      api_key=api_key, fast=True)
        return {"status": "success",
                "message": "Connection successful. The AI provider is reachable."}
    except AIServiceError as e:
        return {"status": "error", "message": friendly_error_message(e)}
