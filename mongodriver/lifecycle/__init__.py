from mongodriver.lifecycle.observability import (
    enable_tracing,
    disable_tracing,
    QueryEvent,
    add_listener,
    remove_listener,
    get_events,
    clear_events,
    track_query,
)

__all__ = [
    "enable_tracing",
    "disable_tracing",
    "QueryEvent",
    "add_listener",
    "remove_listener",
    "get_events",
    "clear_events",
    "track_query",
]
