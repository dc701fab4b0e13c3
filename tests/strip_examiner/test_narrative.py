from unittest.mock import MagicMock, patch

import pytest
import requests

from stripworks.apps.strip_examiner.core.config import (
    ExaminerSettings,
    build_runtime_config,
)
from stripworks.apps.strip_examiner.core.errors import NarrativeError
from stripworks.apps.strip_examiner.core.models import AnalysisSummary
from stripworks.apps.strip_examiner.core.narrative import (
    NarrativeGenerator,
    create_narrative_generator,
)
from stripworks.apps.strip_examiner.core.pipeline import analyze
from stripworks.apps.strip_examiner.core.prompts import get_prompt_profile
from stripworks.apps.strip_examiner.core.sampler import ArrayPixelBuffer


def _response(status=200, body=None, text=""):
    response = MagicMock()
    response.status_code = status
    response.text = text
    response.json.return_value = body if body is not None else {}
    return response


@pytest.fixture
def summary(strip_image, regions):
    return AnalysisSummary.from_outcome(analyze(ArrayPixelBuffer(strip_image), regions))


@pytest.fixture
def narrator():
    config = build_runtime_config(
        settings=ExaminerSettings(), base_url="http://narrator.test/v1", model="m"
    )
    generator = create_narrative_generator(config)
    yield generator
    generator.close()


def test_generate_returns_stripped_text(narrator, summary):
    body = {"choices": [{"message": {"content": "  Strip matches A.  \n"}}]}
    with patch("requests.Session.post", return_value=_response(body=body)) as post:
        text = narrator.generate(summary)

    assert text == "Strip matches A."
    url = post.call_args.args[0]
    assert url == "http://narrator.test/v1/chat/completions"
    payload = post.call_args.kwargs["json"]
    assert payload["model"] == "m"
    assert payload["stream"] is False
    prompt = payload["messages"][-1]["content"]
    assert prompt.startswith("Interpret chemical test result.")
    assert "WB Scaling: R=2.00, G=2.00, B=2.00" in prompt
    assert "Sat: 0.0%" in prompt


def test_http_error_raises(narrator, summary):
    with patch(
        "requests.Session.post", return_value=_response(status=500, text="boom")
    ):
        with pytest.raises(NarrativeError, match="HTTP 500"):
            narrator.generate(summary)


def test_empty_text_raises(narrator, summary):
    body = {"choices": [{"message": {"content": "   "}}]}
    with patch("requests.Session.post", return_value=_response(body=body)):
        with pytest.raises(NarrativeError, match="empty"):
            narrator.generate(summary)


def test_malformed_body_raises(narrator, summary):
    response = _response()
    response.json.side_effect = ValueError("not json")
    with patch("requests.Session.post", return_value=response):
        with pytest.raises(NarrativeError, match="Malformed"):
            narrator.generate(summary)


def test_transport_failure_raises(narrator, summary):
    with patch(
        "requests.Session.post", side_effect=requests.ConnectionError("refused")
    ):
        with pytest.raises(NarrativeError, match="refused"):
            narrator.generate(summary)


def test_field_brief_sends_system_prompt(summary):
    config = build_runtime_config(settings=ExaminerSettings(), prompt_profile="field_brief")
    generator = NarrativeGenerator(
        config=config, prompt_profile=get_prompt_profile("field_brief")
    )
    payload = generator.build_payload(summary)
    generator.close()

    assert [message["role"] for message in payload["messages"]] == ["system", "user"]
    assert "Closest reference: A" in payload["messages"][1]["content"]
    assert payload["max_tokens"] == 256
