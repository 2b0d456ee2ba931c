"""hostbridge - frontend/host bridge for webview applications.

Provides the frontend-side clients that talk to a native host process:
- LiveReloadClient: reconnecting live-reload notification channel
- CommandBridge: request/response invocation of host capabilities
"""

__version__ = "0.1.0"
