import json
import queue

from flask import Response, stream_with_context

from .helpers import serialize_document
from .logger import Log

HEARTBEAT_SECONDS = 15
_CLOSED = object()


def sse_response(subscribe, log_tag="[streaming.py][sse_response]"):
    """
    Server-Sent Events response over a `subscribe(on_snapshot, on_error) -> cancel`
    source. Each snapshot becomes one `snapshot` event; an error sends an
    `error` event and ends the stream. The subscription opens on the first
    read of the body and is cancelled when the client disconnects.
    """
    events = queue.Queue()

    def on_snapshot(snapshot):
        events.put(("snapshot", serialize_document(snapshot)))

    def on_error(error):
        events.put(("error", {"message": str(error)}))
        events.put(_CLOSED)

    def generate():
        cancel = subscribe(on_snapshot, on_error)
        try:
            while True:
                try:
                    item = events.get(timeout=HEARTBEAT_SECONDS)
                except queue.Empty:
                    yield ": keep-alive\n\n"
                    continue
                if item is _CLOSED:
                    break
                event, payload = item
                yield f"event: {event}\ndata: {json.dumps(payload)}\n\n"
        finally:
            cancel()
            Log.info(f"{log_tag} stream closed")

    return Response(
        stream_with_context(generate()),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
