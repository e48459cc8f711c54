"""Use cases orchestrating event processing and shutdown."""

from __future__ import annotations

from .process_event import ProcessPipeline, create_process_log_event
from .shutdown import create_shutdown

__all__ = ["ProcessPipeline", "create_process_log_event", "create_shutdown"]
