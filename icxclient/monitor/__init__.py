"""Block and event monitors over a persistent channel."""

from icxclient.monitor.spec import BlockMonitorSpec, EventMonitorSpec, MonitorSpec
from icxclient.monitor.monitor import Monitor, MonitorHandler, MonitorState

__all__ = [
    "BlockMonitorSpec",
    "EventMonitorSpec",
    "MonitorSpec",
    "Monitor",
    "MonitorHandler",
    "MonitorState",
]
