from unittest.mock import Mock, patch

import pytest
import requests

from stripworks.libs.vlm import (
    OpenAICompatibleBackend,
    VLMBackend,
    VLMBackendError,
    create_backend_client,
    extract_message_content,
)


def test_create_backend_client_normalises_url_and_auth():
    client = create_backend_client(
        VLMBackend.LMDEPLOY,
        base_url="http://localhost:24001/v1/",
        model_name="test-model",
        api_key="secret",
        timeout=30,
    )
    assert isinstance(client, OpenAICompatibleBackend)
    assert client.backend is VLMBackend.LMDEPLOY
    assert client.base_url == "http://localhost:24001/v1"
    assert client.session.headers["Authorization"] == "Bearer secret"
    client.close()


def test_create_backend_client_accepts_plain_strings():
    client = create_backend_client("ollama", base_url="http://o:11434/v1", model_name="m")
    assert client.backend is VLMBackend.OLLAMA
    client.close()

    with pytest.raises(ValueError):
        create_backend_client("gemini", base_url="http://x", model_name="m")


@patch("requests.Session.post")
def test_chat_completions_posts_payload(mock_post):
    mock_post.return_value = Mock(status_code=200)
    client = create_backend_client(
        VLMBackend.VLLM, base_url="http://vllm:8000/v1", model_name="m", timeout=9
    )

    response = client.chat_completions({"model": "m", "messages": []})

    assert response.status_code == 200
    assert mock_post.call_args[0][0] == "http://vllm:8000/v1/chat/completions"
    assert mock_post.call_args.kwargs["timeout"] == 9
    assert client.last_error is None


@patch("requests.Session.post")
def test_chat_completions_wraps_transport_errors(mock_post):
    mock_post.side_effect = requests.Timeout("too slow")
    client = create_backend_client(
        VLMBackend.VLLM, base_url="http://vllm:8000/v1", model_name="m"
    )

    with pytest.raises(VLMBackendError, match="too slow"):
        client.chat_completions({"model": "m", "messages": []})
    assert "too slow" in client.last_error


def test_extract_message_content():
    body = {"choices": [{"message": {"content": "  A is the match.\n"}}]}
    assert extract_message_content(body) == "A is the match."
    assert extract_message_content({"choices": []}) == ""
    assert extract_message_content({}) == ""
