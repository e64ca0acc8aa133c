# --- core/llm_utils.py ---
import base64
import json
import logging
import re
import time

import requests

log_llm = logging.getLogger("elder.llm")

MAX_RETRIES = 3
RETRY_DELAY_S = 0.4
RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class LLMConfigError(RuntimeError):
    """Raised when the LLM endpoint cannot be used because of missing settings."""


class LLMServiceError(RuntimeError):
    """Raised when the LLM endpoint fails or returns an unusable response."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


def _format_text_for_log(text: str) -> str:
    """Formats a long text block into a concise, single-line summary for logging."""
    single_line_text = str(text).replace("\n", " ").strip()
    if len(single_line_text) > 240:
        return f'"{single_line_text[:115]}...{single_line_text[-115:]}"'
    return f'"{single_line_text}"'


def extract_json_from_llm_response(text: str) -> dict | list | None:
    """Finds and parses the first valid JSON object or array in a string."""
    try:
        return json.loads(text)
    except (TypeError, json.JSONDecodeError):
        pass

    match = re.search(r"(\{.*\}|\[.*\])", text or "", re.DOTALL)
    if not match:
        log_llm.warning("No JSON object or array found in LLM response.")
        return None

    json_str = match.group(0)

    # Attempt to fix common errors, like trailing commas
    json_str = re.sub(r",\s*([\]}])", r"\1", json_str)

    try:
        return json.loads(json_str)
    except json.JSONDecodeError as e:
        log_llm.warning(
            "Failed to parse extracted JSON string. Error: %s\nString: %s",
            e,
            json_str,
        )
        return None


def _auth_headers(api_key: str) -> dict:
    if not api_key:
        raise LLMConfigError("LLM_API_KEY is not configured")
    return {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}


def _post_with_retry(url: str, payload: dict, headers: dict, timeout: int) -> dict:
    """POSTs a JSON payload, retrying rate limits, 5xx answers and connection drops."""
    last_error = None
    for attempt in range(1, MAX_RETRIES + 1):
        try:
            response = requests.post(url, json=payload, headers=headers, timeout=timeout)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as e:
            last_error = LLMServiceError(f"Could not reach LLM endpoint: {e}")
        else:
            if response.status_code < 400:
                return response.json()
            last_error = LLMServiceError(
                f"LLM endpoint returned HTTP {response.status_code}: {response.text[:200]}",
                status=response.status_code,
            )
            if response.status_code not in RETRYABLE_STATUS:
                raise last_error

        log_llm.warning(
            "LLM request failed on attempt %d/%d: %s", attempt, MAX_RETRIES, last_error
        )
        if attempt < MAX_RETRIES:
            time.sleep(RETRY_DELAY_S * attempt)

    log_llm.error("LLM request failed after %d attempts.", MAX_RETRIES)
    raise last_error


def query_chat_llm(
    messages: list[dict],
    api_url: str,
    api_key: str,
    model: str,
    temperature: float = None,
    json_mode: bool = False,
    raw_response_log: bool = False,
    timeout: int = 120,
) -> str:
    """
    Sends a chat completion request to an OpenAI-compatible endpoint.
    Returns the text content of the first choice.
    """
    headers = _auth_headers(api_key)
    payload = {"model": model, "messages": messages}
    if temperature is not None:
        payload["temperature"] = temperature
    if json_mode:
        payload["response_format"] = {"type": "json_object"}

    system_prompt = next((m["content"] for m in messages if m.get("role") == "system"), "")
    log_llm.debug(
        "Querying LLM:\n  - Model: %s (JSON: %s)\n  - System: %s",
        model,
        json_mode,
        _format_text_for_log(system_prompt),
    )
    start_time = time.monotonic()
    data = _post_with_retry(f"{api_url.rstrip('/')}/chat/completions", payload, headers, timeout)

    choices = data.get("choices") or []
    content = (choices[0].get("message") or {}).get("content") if choices else None
    if not content:
        raise LLMServiceError("LLM returned empty content")

    if raw_response_log:
        log_llm.debug("--- Raw LLM Response Text ---\n%s", content)
    usage = data.get("usage") or {}
    log_llm.debug(
        "LLM Query OK: model=%s duration=%.2fs prompt_tk=%s response_tk=%s response=%s",
        model,
        time.monotonic() - start_time,
        usage.get("prompt_tokens", "?"),
        usage.get("completion_tokens", "?"),
        _format_text_for_log(content),
    )
    return content


def query_json_llm(messages: list[dict], api_url: str, api_key: str, model: str, **kwargs) -> dict:
    """Runs a JSON-mode chat completion and returns the decoded object."""
    content = query_chat_llm(messages, api_url, api_key, model, json_mode=True, **kwargs)
    parsed = extract_json_from_llm_response(content)
    if not isinstance(parsed, dict):
        raise ValueError("LLM response is not a JSON object")
    return parsed


def generate_image(
    prompt: str, api_url: str, api_key: str, model: str, size: str = "1024x1024"
) -> bytes:
    """Generates one image and returns its raw bytes."""
    headers = _auth_headers(api_key)
    log_llm.debug("Generating image with %s: %s", model, _format_text_for_log(prompt))
    data = _post_with_retry(
        f"{api_url.rstrip('/')}/images/generations",
        {"model": model, "prompt": prompt, "size": size},
        headers,
        timeout=300,
    )

    first = (data.get("data") or [{}])[0]
    if first.get("b64_json"):
        return base64.b64decode(first["b64_json"])

    if first.get("url"):
        response = requests.get(first["url"], timeout=60)
        if response.status_code >= 400:
            raise LLMServiceError("Failed to download generated image", status=response.status_code)
        return response.content

    raise LLMServiceError("Image generation returned no usable image payload")
