"""Host route modules."""

from hostbridge.host.routes import api, files, pages, ws

__all__ = ["api", "files", "pages", "ws"]
