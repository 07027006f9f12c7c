"""
Realtime push for open screens.

In-memory broadcaster, not persisted. Every connected browser holds one
queue; a change is copied to all queues and streamed as Server-Sent Events.
Clients re-fetch full state when they (re)connect.
"""

import json
import logging
import queue
import threading

from django.conf import settings
from django.dispatch import receiver
from django.http import StreamingHttpResponse
from django.utils import timezone

from . import signals

logger = logging.getLogger(__name__)

QUEUE_SIZE = 100


class EventHub:
    """Fan-out of named events to every subscriber."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers = []

    def subscribe(self):
        q = queue.Queue(maxsize=QUEUE_SIZE)
        with self._lock:
            self._subscribers.append(q)
        return q

    def unsubscribe(self, q):
        with self._lock:
            try:
                self._subscribers.remove(q)
            except ValueError:
                pass

    @property
    def subscriber_count(self):
        with self._lock:
            return len(self._subscribers)

    def publish(self, event, **data):
        message = {'event': event, 'data': data}
        with self._lock:
            subscribers = list(self._subscribers)
        for q in subscribers:
            try:
                q.put_nowait(message)
            except queue.Full:
                logger.warning("Dropping %s for a slow client", event)


hub = EventHub()


# =============================================================================
# Signal receivers
# =============================================================================

@receiver(signals.stock_changed)
def on_stock_changed(sender, **kwargs):
    hub.publish('StockChanged')


@receiver(signals.table_status_changed)
def on_table_status_changed(sender, table_id, **kwargs):
    hub.publish('TableStatusChanged', table_id=table_id)


@receiver(signals.order_changed)
def on_order_changed(sender, order_id, **kwargs):
    hub.publish('OrderChanged', order_id=order_id)


# =============================================================================
# Server-Sent Events
# =============================================================================

def format_sse(message):
    return f"event: {message['event']}\ndata: {json.dumps(message['data'])}\n\n"


def event_stream(keepalive=None):
    keepalive = keepalive or settings.RESTO_SSE_KEEPALIVE
    subscription = hub.subscribe()
    try:
        yield format_sse({'event': 'ping', 'data': {'ts': timezone.now().isoformat()}})
        while True:
            try:
                message = subscription.get(timeout=keepalive)
            except queue.Empty:
                yield ": keepalive\n\n"
                continue
            yield format_sse(message)
    finally:
        hub.unsubscribe(subscription)


def stream_response():
    response = StreamingHttpResponse(
        event_stream(),
        content_type='text/event-stream',
    )
    response['Cache-Control'] = 'no-cache'
    response['X-Accel-Buffering'] = 'no'
    return response
