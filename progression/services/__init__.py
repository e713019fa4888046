"""
Service Layer Package

Wires the progression components together and exposes the entry points
collaborators call.

- ActivityRecorder: task / Pomodoro / DSA completion orchestration
- BackgroundDispatcher: fire-and-forget best-effort work
- ServiceContainer: lazy construction of every component
"""

from progression.services.container import ServiceContainer, get_container, init_container
from progression.services.background import BackgroundDispatcher
from progression.services.activity_recorder import ActivityRecorder

__all__ = [
    "ServiceContainer",
    "get_container",
    "init_container",
    "BackgroundDispatcher",
    "ActivityRecorder",
]
