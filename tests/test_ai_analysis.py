"""Tests for the language-model analysis relay."""

from unittest.mock import Mock

import pytest
import requests

from pricepulse.errors import (
    ConfigurationError,
    CreditsExhaustedError,
    RateLimitedError,
    UpstreamError,
    ValidationError,
)
from pricepulse.services.ai_analysis import (
    SYSTEM_INSTRUCTION,
    RemoteAnalysisService,
    build_prompt,
    compute_gateway_statistics,
    parse_analysis_text,
)

REPLY = (
    "SUMMARY: Good deal at the current price.\n"
    "RECOMMENDATION: The price is near its low and reviews are strong."
)


def _response(status_code=200, content=REPLY):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = "error body"
    response.json.return_value = {"choices": [{"message": {"content": content}}]}
    return response


def _service(response=None, api_key="test-key"):
    session = Mock()
    session.post.return_value = response or _response()
    service = RemoteAnalysisService(
        api_key=api_key,
        gateway_url="https://gateway.example/v1/chat/completions",
        model="test-model",
        timeout=5,
        session=session,
    )
    return service, session


PAYLOAD = {
    "product": {"name": "Wireless Headphones", "current_price": 90},
    "priceHistory": [{"price": 100}, {"price": 80}, {"price": 120}],
    "reviews": [
        {"rating": 5, "review_text": "Great sound"},
        {"rating": 2, "review_text": "Creaky hinge"},
    ],
}


def test_gateway_statistics():
    stats = compute_gateway_statistics(PAYLOAD["product"], PAYLOAD["priceHistory"])
    assert stats["lowest"] == 80
    assert stats["highest"] == 120
    assert stats["average"] == pytest.approx(100)
    assert stats["price_position"] == pytest.approx(25)
    assert stats["worth_buying_score"] == 75


def test_gateway_statistics_with_empty_history():
    stats = compute_gateway_statistics({"current_price": 500}, [])
    assert stats["lowest"] == stats["highest"] == 500
    assert stats["worth_buying_score"] == 50


def test_prompt_contents():
    reviews = [{"rating": 5, "review_text": f"Positive {i}"} for i in range(5)]
    reviews.append({"rating": 1, "review_text": "Broke quickly"})
    stats = compute_gateway_statistics({"current_price": 124999}, [{"price": 124999}])
    prompt = build_prompt({"name": "Laptop"}, stats, reviews)

    assert "Product: Laptop" in prompt
    assert "Current Price: ₹1,24,999" in prompt
    assert "Positive Reviews: 5" in prompt
    assert "Negative Reviews: 1" in prompt
    assert '"Positive 2"' in prompt
    assert '"Positive 3"' not in prompt
    assert '"Broke quickly"' in prompt
    assert "SUMMARY:" in prompt
    assert "RECOMMENDATION:" in prompt


def test_analyze_returns_parsed_reply():
    service, session = _service()
    result = service.analyze(PAYLOAD)

    assert result == {
        "worthBuyingScore": 75,
        "summary": "Good deal at the current price.",
        "detailedRecommendation": "The price is near its low and reviews are strong.",
        "analysisText": REPLY,
    }
    session.post.assert_called_once()
    _, kwargs = session.post.call_args
    assert kwargs["headers"]["Authorization"] == "Bearer test-key"
    assert kwargs["json"]["model"] == "test-model"
    assert kwargs["json"]["messages"][0] == {"role": "system", "content": SYSTEM_INSTRUCTION}
    assert kwargs["timeout"] == 5


@pytest.mark.parametrize("status_code,error", [
    (429, RateLimitedError),
    (402, CreditsExhaustedError),
    (500, UpstreamError),
    (503, UpstreamError),
])
def test_gateway_errors_are_not_retried(status_code, error):
    service, session = _service(_response(status_code))
    with pytest.raises(error):
        service.analyze(PAYLOAD)
    assert session.post.call_count == 1


def test_error_statuses_and_messages():
    assert RateLimitedError().status_code == 429
    assert RateLimitedError().message == "Rate limit exceeded. Please try again later."
    assert CreditsExhaustedError().status_code == 402
    assert UpstreamError("AI analysis failed").status_code == 500


def test_missing_api_key():
    service, session = _service(api_key=None)
    with pytest.raises(ConfigurationError) as excinfo:
        service.analyze(PAYLOAD)
    assert "AI_GATEWAY_API_KEY" in excinfo.value.message
    session.post.assert_not_called()


def test_connection_error():
    service, session = _service()
    session.post.side_effect = requests.ConnectionError("unreachable")
    with pytest.raises(UpstreamError):
        service.analyze(PAYLOAD)


def test_unexpected_response_shape():
    response = _response()
    response.json.return_value = {"choices": []}
    service, _ = _service(response)
    with pytest.raises(UpstreamError):
        service.analyze(PAYLOAD)


@pytest.mark.parametrize("payload", [
    None,
    [],
    {},
    {"product": "Laptop"},
    {"product": {"name": "Laptop"}, "reviews": "great"},
])
def test_malformed_payload(payload):
    service, session = _service()
    with pytest.raises(ValidationError):
        service.analyze(payload)
    session.post.assert_not_called()


def test_parse_fields():
    assert parse_analysis_text(REPLY) == (
        "Good deal at the current price.",
        "The price is near its low and reviews are strong.",
    )


def test_parse_bold_fields_spanning_lines():
    text = (
        "**Summary:** A fair price.\n"
        "Worth a look.\n"
        "**Recommendation:** Wait a week.\n"
        "Prices usually dip."
    )
    assert parse_analysis_text(text) == (
        "A fair price. Worth a look.",
        "Wait a week. Prices usually dip.",
    )


def test_parse_numbered_markers():
    text = (
        "1. Summary: Good deal now.\n"
        "\n"
        "2. Detailed recommendation: The price is low."
    )
    assert parse_analysis_text(text) == ("Good deal now.", "The price is low.")


def test_parse_headings():
    text = (
        "**Summary**\n"
        "Great deal at this price.\n"
        "\n"
        "**Detailed Recommendation**\n"
        "The price dropped 10%."
    )
    assert parse_analysis_text(text) == (
        "Great deal at this price.",
        "The price dropped 10%.",
    )


def test_parse_paragraph_fallback():
    text = "First paragraph here.\n\nSecond paragraph here."
    assert parse_analysis_text(text) == ("First paragraph here.", "Second paragraph here.")


def test_parse_single_block_fallback():
    text = "x" * 300
    summary, detailed = parse_analysis_text(text)
    assert summary == text
    assert detailed == "x" * 100
