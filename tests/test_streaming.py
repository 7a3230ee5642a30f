import json

from orderflow.utils.streaming import sse_response


def _source(calls):
    def subscribe(on_snapshot, on_error):
        calls.append("subscribe")
        on_snapshot([{"name": "Alice"}])
        return lambda: calls.append("cancel")
    return subscribe


def test_subscription_opens_on_first_read_and_closes_with_response(app):
    calls = []
    with app.test_request_context():
        response = sse_response(_source(calls))
        assert calls == []

        chunk = next(response.response)
        assert calls == ["subscribe"]
        assert chunk.startswith("event: snapshot\n")
        assert json.loads(chunk.split("data: ", 1)[1]) == [{"name": "Alice"}]

        response.close()
    assert calls == ["subscribe", "cancel"]


def test_unread_response_never_subscribes(app):
    calls = []
    with app.test_request_context():
        response = sse_response(_source(calls))
        response.close()

    assert calls == []


def test_error_event_ends_stream(app):
    calls = []

    def subscribe(on_snapshot, on_error):
        on_error(RuntimeError("stream lost"))
        return lambda: calls.append("cancel")

    with app.test_request_context():
        chunks = list(sse_response(subscribe).response)

    assert chunks == ['event: error\ndata: {"message": "stream lost"}\n\n']
    assert calls == ["cancel"]
