import base64

import pytest
import requests

from core.llm_utils import (
    LLMConfigError,
    LLMServiceError,
    extract_json_from_llm_response,
    generate_image,
    query_chat_llm,
    query_json_llm,
)

MESSAGES = [{"role": "system", "content": "sys"}, {"role": "user", "content": "hi"}]


def _response(mocker, status=200, json_data=None, text="", content=b""):
    response = mocker.MagicMock()
    response.status_code = status
    response.json.return_value = json_data or {}
    response.text = text
    response.content = content
    return response


def _chat(content):
    return {"choices": [{"message": {"content": content}}], "usage": {"prompt_tokens": 3}}


@pytest.fixture
def no_sleep(mocker):
    return mocker.patch("core.llm_utils.time.sleep")


def test_extract_json_from_llm_response():
    assert extract_json_from_llm_response('{"a": 1}') == {"a": 1}
    assert extract_json_from_llm_response('```json\n{"a": 1,}\n```') == {"a": 1}
    assert extract_json_from_llm_response("Here: [1, 2,] done") == [1, 2]
    assert extract_json_from_llm_response("no json at all") is None


def test_missing_api_key_is_a_config_error(mocker):
    post = mocker.patch("core.llm_utils.requests.post")
    with pytest.raises(LLMConfigError):
        query_chat_llm(MESSAGES, "http://llm/v1", "", "model")
    post.assert_not_called()


def test_query_chat_llm_builds_request(mocker):
    post = mocker.patch(
        "core.llm_utils.requests.post", return_value=_response(mocker, json_data=_chat("hello"))
    )

    result = query_chat_llm(MESSAGES, "http://llm/v1/", "key", "gpt", temperature=0.2, json_mode=True)

    assert result == "hello"
    args, kwargs = post.call_args
    assert args[0] == "http://llm/v1/chat/completions"
    assert kwargs["json"]["temperature"] == 0.2
    assert kwargs["json"]["response_format"] == {"type": "json_object"}
    assert kwargs["headers"]["Authorization"] == "Bearer key"


def test_retries_retryable_status(mocker, no_sleep):
    post = mocker.patch(
        "core.llm_utils.requests.post",
        side_effect=[_response(mocker, status=503, text="busy"), _response(mocker, json_data=_chat("ok"))],
    )

    assert query_chat_llm(MESSAGES, "http://llm/v1", "key", "gpt") == "ok"
    assert post.call_count == 2
    no_sleep.assert_called_once()


def test_client_error_is_not_retried(mocker, no_sleep):
    post = mocker.patch(
        "core.llm_utils.requests.post", return_value=_response(mocker, status=400, text="bad")
    )

    with pytest.raises(LLMServiceError) as excinfo:
        query_chat_llm(MESSAGES, "http://llm/v1", "key", "gpt")

    assert excinfo.value.status == 400
    assert post.call_count == 1
    no_sleep.assert_not_called()


def test_gives_up_after_repeated_connection_errors(mocker, no_sleep):
    post = mocker.patch(
        "core.llm_utils.requests.post", side_effect=requests.exceptions.ConnectionError("down")
    )

    with pytest.raises(LLMServiceError, match="Could not reach"):
        query_chat_llm(MESSAGES, "http://llm/v1", "key", "gpt")

    assert post.call_count == 3
    assert no_sleep.call_count == 2


def test_empty_content_is_an_error(mocker):
    mocker.patch("core.llm_utils.requests.post", return_value=_response(mocker, json_data={"choices": []}))
    with pytest.raises(LLMServiceError, match="empty content"):
        query_chat_llm(MESSAGES, "http://llm/v1", "key", "gpt")


def test_query_json_llm_requires_an_object(mocker):
    mocker.patch(
        "core.llm_utils.requests.post", return_value=_response(mocker, json_data=_chat('{"x": 1}'))
    )
    assert query_json_llm(MESSAGES, "http://llm/v1", "key", "gpt") == {"x": 1}

    mocker.patch(
        "core.llm_utils.requests.post", return_value=_response(mocker, json_data=_chat("[1, 2]"))
    )
    with pytest.raises(ValueError):
        query_json_llm(MESSAGES, "http://llm/v1", "key", "gpt")


def test_generate_image_from_base64(mocker):
    encoded = base64.b64encode(b"\x89PNG").decode("ascii")
    post = mocker.patch(
        "core.llm_utils.requests.post",
        return_value=_response(mocker, json_data={"data": [{"b64_json": encoded}]}),
    )

    assert generate_image("a rune", "http://llm/v1", "key", "gpt-image-1") == b"\x89PNG"
    assert post.call_args[0][0] == "http://llm/v1/images/generations"


def test_generate_image_downloads_url(mocker):
    mocker.patch(
        "core.llm_utils.requests.post",
        return_value=_response(mocker, json_data={"data": [{"url": "http://cdn/icon.png"}]}),
    )
    get = mocker.patch(
        "core.llm_utils.requests.get", return_value=_response(mocker, content=b"image-bytes")
    )

    assert generate_image("a rune", "http://llm/v1", "key", "gpt-image-1") == b"image-bytes"
    get.assert_called_once_with("http://cdn/icon.png", timeout=60)


def test_generate_image_without_payload_fails(mocker):
    mocker.patch("core.llm_utils.requests.post", return_value=_response(mocker, json_data={"data": []}))
    with pytest.raises(LLMServiceError):
        generate_image("a rune", "http://llm/v1", "key", "gpt-image-1")
