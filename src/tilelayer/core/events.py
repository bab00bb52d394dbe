from typing import Any, Callable, Dict, List

Handler = Callable[[Dict[str, Any]], None]


class Evented:
    """Minimal synchronous event emitter"""

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}

    def on(self, event_type: str, handler: Handler) -> 'Evented':
        self._handlers.setdefault(event_type, []).append(handler)
        return self

    def off(self, event_type: str, handler: Handler) -> 'Evented':
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
        return self

    def listens(self, event_type: str) -> bool:
        return bool(self._handlers.get(event_type))

    def fire(self, event_type: str, **data: Any) -> 'Evented':
        """Call handlers in registration order with {'type', 'target', **data}"""
        event = {'type': event_type, 'target': self}
        event.update(data)
        for handler in list(self._handlers.get(event_type, [])):
            handler(event)
        return self
