"""Web 服务模块"""

from panehub.web.app import create_app
from panehub.web.server import WebServer

__all__ = ["create_app", "WebServer"]
