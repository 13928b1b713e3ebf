import pytest

from chatgpt_client.api.client import ConversationClient
from chatgpt_client.domain.exceptions import DecodeError, TransportError
from chatgpt_client.streaming.decoder import IterLineSource
from chatgpt_client.streaming.stream import ConversationStream


class SettingsStub:
    access_token = "token-1234567890"
    default_model = "text-davinci-002-render-sha"
    stream_buffer_size = 8


class FakeTransport:
    def __init__(self, json_data=None, body="", lines=None, error=None):
        self.json_data = json_data
        self.body = body
        self.lines = lines or []
        self.error = error
        self.calls = []
        self.closed = 0

    def get_json(self, path, params=None):
        self.calls.append(("get", path, params))
        if self.error:
            raise self.error
        return self.json_data

    def post_text(self, path, body):
        self.calls.append(("post_text", path, body))
        if self.error:
            raise self.error
        return self.body

    def post_stream(self, path, body):
        self.calls.append(("post_stream", path, body))
        if self.error:
            raise self.error
        return IterLineSource(self.lines, on_close=self._on_close)

    def _on_close(self):
        self.closed += 1


def test_list_models():
    transport = FakeTransport(
        json_data={
            "models": [
                {"slug": "text-davinci-002-render-sha", "max_tokens": 4097, "title": "Default", "tags": []},
            ],
            "unknown": True,
        }
    )
    client = ConversationClient(transport=transport, cfg=SettingsStub())
    models = client.list_models()
    assert models.models[0].slug == "text-davinci-002-render-sha"
    assert models.models[0].max_tokens == 4097
    assert transport.calls == [("get", "api/models", None)]


def test_list_conversations_forwards_paging_unchecked():
    transport = FakeTransport(
        json_data={"items": [{"id": "c1", "title": "Hello"}], "total": 1, "limit": 20, "offset": 0}
    )
    client = ConversationClient(transport=transport, cfg=SettingsStub())
    convs = client.list_conversations(-1, 10000)
    assert transport.calls == [("get", "api/conversations", {"offset": -1, "limit": 10000})]
    assert convs.items[0].id == "c1"
    assert convs.total == 1


def test_list_errors_propagate_unchanged():
    err = TransportError(code="NETWORK_ERROR", message="timeout")
    client = ConversationClient(transport=FakeTransport(error=err), cfg=SettingsStub())
    with pytest.raises(TransportError) as ei:
        client.list_models()
    assert ei.value is err


def test_list_models_rejects_non_object():
    client = ConversationClient(transport=FakeTransport(json_data=[1, 2]), cfg=SettingsStub())
    with pytest.raises(DecodeError):
        client.list_models()


def test_batch_conversation_decodes_body():
    transport = FakeTransport(body='data: {"a":1}\n\ndata: [DONE]\n')
    client = ConversationClient(transport=transport, cfg=SettingsStub())
    events = client.get_new_conversation_batch("hi")
    assert [e.raw for e in events] == [{"a": 1}]
    kind, path, body = transport.calls[0]
    assert kind == "post_text"
    assert path == "api/conversation"
    assert body["action"] == "next"
    assert body["messages"][0]["content"]["parts"] == ["hi"]
    assert "conversation_id" not in body


def test_batch_conversation_no_partial_list():
    transport = FakeTransport(body='data: {"a":1}\ndata: oops\n')
    client = ConversationClient(transport=transport, cfg=SettingsStub())
    with pytest.raises(DecodeError):
        client.get_new_conversation_batch("hi")


def test_stream_conversation():
    transport = FakeTransport(
        lines=[
            'data: {"message": {"id": "m1", "content": {"content_type": "text", "parts": ["Hel"]}}, "conversation_id": "c1"}',
            "",
            'data: {"message": {"id": "m1", "content": {"content_type": "text", "parts": ["Hello"]}}, "conversation_id": "c1"}',
            "data: [DONE]",
        ]
    )
    client = ConversationClient(transport=transport, cfg=SettingsStub())
    stream = client.stream_new_conversation("hi")
    assert isinstance(stream, ConversationStream)
    texts = [e.text for e in stream]
    assert texts == ["Hel", "Hello"]
    assert stream.join(timeout=2)
    assert transport.closed == 1
    assert transport.calls[0][0] == "post_stream"


def test_stream_conversation_transport_failure():
    err = TransportError(code="NETWORK_ERROR", message="connection refused")
    client = ConversationClient(transport=FakeTransport(error=err), cfg=SettingsStub())
    stream = client.stream_new_conversation("hi")
    with pytest.raises(TransportError):
        next(stream)


def test_requests_use_configured_model():
    class Custom(SettingsStub):
        default_model = "gpt-4"

    client = ConversationClient(transport=FakeTransport(), cfg=Custom())
    assert client.build_new_conversation_request("x").model == "gpt-4"


def test_with_token_builds_httpx_client():
    client = ConversationClient.with_token("token-1234567890", base_url="https://example.test", timeout=5.0)
    assert client._settings.access_token == "token-1234567890"
    assert client._settings.http_timeout == 5.0
