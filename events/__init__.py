from events.event_bus import Event, EventBus, EventTypes

__all__ = ["Event", "EventBus", "EventTypes"]
