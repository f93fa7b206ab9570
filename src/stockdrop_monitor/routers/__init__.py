"""API routers.

- /monitor/run - trigger one price-drop monitoring cycle
"""
from stockdrop_monitor.routers.monitor import router as monitor_router

__all__ = ["monitor_router"]
