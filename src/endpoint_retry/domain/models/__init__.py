"""Request-side value objects"""

from endpoint_retry.domain.models.request import Endpoint, Fetch, Handler, RequestContext

__all__ = ["Endpoint", "Fetch", "Handler", "RequestContext"]
