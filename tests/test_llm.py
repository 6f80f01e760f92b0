from types import SimpleNamespace
from unittest.mock import MagicMock, patch
from tradebot.models.result import Err, ErrorKind, Ok, REASON_INVALID_RESPONSE, SOURCE_CHAT
from tradebot.services.llm import SYSTEM_PROMPT, LLMService

def completion(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])

def test_missing_key_is_config_error():
    with patch("tradebot.services.llm.Together") as together:
        service = LLMService(api_key=None)
        result = service.complete("hi")

    together.assert_not_called()
    assert not service.configured
    assert result.kind == ErrorKind.CONFIG
    assert result.source == SOURCE_CHAT

def test_client_is_built_without_retries():
    with patch("tradebot.services.llm.Together") as together:
        service = LLMService(api_key="k", base_url=None)

    together.assert_called_once_with(api_key="k", base_url=None, max_retries=0)
    assert service.client is together.return_value

def test_complete_strips_reply():
    client = MagicMock()
    client.chat.completions.create.return_value = completion("  Hello trader!\n")
    service = LLMService(client=client, model="test-model", max_tokens=300, temperature=0.7)

    assert service.complete("hi") == Ok("Hello trader!")
    client.chat.completions.create.assert_called_once_with(
        model="test-model",
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": "hi"},
        ],
        max_tokens=300,
        temperature=0.7,
    )

def test_transport_failure_is_upstream_error():
    client = MagicMock()
    client.chat.completions.create.side_effect = RuntimeError("503 Service Unavailable")

    result = LLMService(client=client).complete("hi")
    assert result == Err(ErrorKind.UPSTREAM, SOURCE_CHAT, "503 Service Unavailable")
    assert client.chat.completions.create.call_count == 1

def test_missing_choices_is_invalid_response():
    client = MagicMock()
    client.chat.completions.create.return_value = SimpleNamespace(choices=[])

    result = LLMService(client=client).complete("hi")
    assert result.reason == REASON_INVALID_RESPONSE

def test_empty_content_is_invalid_response():
    client = MagicMock()
    client.chat.completions.create.return_value = completion(None)

    result = LLMService(client=client).complete("hi")
    assert result.kind == ErrorKind.UPSTREAM
    assert result.reason == REASON_INVALID_RESPONSE
