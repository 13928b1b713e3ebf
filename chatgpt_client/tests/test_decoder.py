import pytest

from chatgpt_client.domain.exceptions import DecodeError, TransportError
from chatgpt_client.streaming.decoder import IterLineSource, decode_lines, is_disguised_completion


class CloseCounter:
    def __init__(self):
        self.count = 0

    def __call__(self):
        self.count += 1


def _source(lines, counter=None):
    return IterLineSource(lines, on_close=counter)


def _failing_lines(lines, error):
    for line in lines:
        yield line
    raise error


def test_decode_skips_empty_and_stops_at_sentinel():
    closed = CloseCounter()
    events = list(decode_lines(_source(['data: {"a":1}', "", "data: [DONE]", 'data: {"a":2}'], closed)))
    assert [e.raw for e in events] == [{"a": 1}]
    assert closed.count == 1


def test_decode_natural_exhaustion_is_clean():
    events = list(decode_lines(_source(['data: {"a":1}', 'data: {"a":2}'])))
    assert [e.raw["a"] for e in events] == [1, 2]


def test_decode_empty_source():
    closed = CloseCounter()
    assert list(decode_lines(_source([], closed))) == []
    assert closed.count == 1


def test_decode_error_stops_stream():
    closed = CloseCounter()
    gen = decode_lines(_source(['data: {"a":1}', "data: not-json", 'data: {"a":2}', "data: [DONE]"], closed))
    assert next(gen).raw == {"a": 1}
    with pytest.raises(DecodeError):
        next(gen)
    assert list(gen) == []
    assert closed.count == 1


def test_decode_error_on_first_frame():
    with pytest.raises(DecodeError):
        list(decode_lines(_source(["data: not-json", "data: [DONE]"])))


def test_disguised_completion_fault_is_clean_end():
    closed = CloseCounter()
    lines = _failing_lines(['data: {"a":1}'], OSError("data: [DONE]"))
    events = list(decode_lines(_source(lines, closed)))
    assert [e.raw for e in events] == [{"a": 1}]
    assert closed.count == 1


def test_disguised_completion_as_transport_error():
    lines = _failing_lines([], TransportError(code="NETWORK_ERROR", message="data: [DONE]"))
    assert list(decode_lines(_source(lines))) == []


def test_transport_fault_propagates():
    closed = CloseCounter()
    lines = _failing_lines(['data: {"a":1}'], OSError("connection reset"))
    gen = decode_lines(_source(lines, closed))
    assert next(gen).raw == {"a": 1}
    with pytest.raises(TransportError) as ei:
        next(gen)
    assert ei.value.message == "connection reset"
    assert isinstance(ei.value.__cause__, OSError)
    assert list(gen) == []
    assert closed.count == 1


def test_transport_error_reraised_unchanged():
    err = TransportError(code="NETWORK_ERROR", message="read timeout")
    with pytest.raises(TransportError) as ei:
        list(decode_lines(_source(_failing_lines([], err))))
    assert ei.value is err


def test_sentinel_match_is_exact():
    assert is_disguised_completion(OSError("data: [DONE]"))
    assert not is_disguised_completion(OSError("data: [DONE] "))
    assert not is_disguised_completion(OSError("stream closed: data: [DONE]"))


def test_early_abandonment_releases_source_once():
    closed = CloseCounter()
    source = _source(['data: {"a":1}', 'data: {"a":2}', 'data: {"a":3}'], closed)
    gen = decode_lines(source)
    assert next(gen).raw == {"a": 1}
    gen.close()
    assert closed.count == 1
    source.close()
    assert closed.count == 1


def test_single_pass_reiteration_is_empty():
    gen = decode_lines(_source(['data: {"a":1}']))
    assert len(list(gen)) == 1
    assert list(gen) == []


def test_iter_line_source_lookahead():
    source = IterLineSource(["a", "b"])
    assert not source.exhausted()
    assert source.read_line() == "a"
    assert source.read_line() == "b"
    assert source.exhausted()
    assert source.read_line() is None
