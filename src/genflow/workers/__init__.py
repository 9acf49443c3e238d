"""Background polling of provider tasks."""

from .poller import PollingFailure, PollingPolicy, PollingSupervisor, TaskPoller

__all__ = ["PollingFailure", "PollingPolicy", "PollingSupervisor", "TaskPoller"]
