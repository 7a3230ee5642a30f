# orderflow/services/live_query.py
from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional

from pymongo.errors import PyMongoError

from ..utils.logger import Log


class LiveQuery:
    """
    A query whose results are pushed to a subscriber whenever the underlying
    collection changes.

    subscribe() delivers the current result set immediately, then a fresh
    result set after every change event from the collection's change stream.
    Each subscription has its own stream and thread; there is no ordering
    between different subscriptions. Errors end the subscription (no
    reconnection).
    """

    MAX_AWAIT_MS = 500

    def __init__(
        self,
        collection,
        query: Optional[Dict[str, Any]] = None,
        *,
        sort: Optional[List[tuple]] = None,
        pipeline: Optional[List[Dict[str, Any]]] = None,
        transform: Optional[Callable[[List[dict]], Any]] = None,
    ):
        self.collection = collection
        self.query = query or {}
        self.sort = sort
        self.pipeline = pipeline or []
        self.transform = transform

    def snapshot(self):
        cursor = self.collection.find(self.query)
        if self.sort:
            cursor = cursor.sort(self.sort)
        docs = list(cursor)
        return self.transform(docs) if self.transform else docs

    def subscribe(
        self,
        on_snapshot: Callable[[Any], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Callable[[], None]:
        log_tag = f"[live_query.py][LiveQuery][subscribe][{self.collection.name}]"
        cancelled = threading.Event()

        # open the stream before the first read so no change is missed in between
        try:
            stream = self.collection.watch(self.pipeline, max_await_time_ms=self.MAX_AWAIT_MS)
            on_snapshot(self.snapshot())
        except PyMongoError as e:
            Log.error(f"{log_tag} could not start subscription: {e}")
            if on_error:
                on_error(e)
            return lambda: None

        def _run():
            try:
                while not cancelled.is_set() and stream.alive:
                    change = stream.try_next()
                    if change is None or cancelled.is_set():
                        continue
                    on_snapshot(self.snapshot())
            except PyMongoError as e:
                if not cancelled.is_set():
                    Log.error(f"{log_tag} subscription failed: {e}")
                    if on_error:
                        on_error(e)
            finally:
                stream.close()

        worker = threading.Thread(target=_run, name=f"live-{self.collection.name}", daemon=True)
        worker.start()

        def cancel():
            cancelled.set()

        return cancel
