"""Report server web service proxy."""

from .web_service import WebServiceProxy, new_web_service_proxy

__all__ = ["WebServiceProxy", "new_web_service_proxy"]
