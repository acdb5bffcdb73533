import pytest

from gamification.utils.tracing import add_span_metadata, get_current_span, trace_span


def test_spans_nest_and_reset():
    assert get_current_span() is None
    with trace_span('outer', {'a': 1}) as outer:
        with trace_span('inner') as inner:
            add_span_metadata('b', 2)
            assert get_current_span() is inner
        assert get_current_span() is outer

    assert get_current_span() is None
    assert outer.children == [inner]
    assert inner.depth == 1
    assert inner.metadata == {'b': 2}
    assert outer.duration is not None and outer.duration >= inner.duration


def test_span_records_error_name():
    with pytest.raises(KeyError):
        with trace_span('boom') as span:
            raise KeyError('x')
    assert span.error == 'KeyError'
    assert get_current_span() is None


def test_add_metadata_without_span_is_noop():
    add_span_metadata('ignored', True)
