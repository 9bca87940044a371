"""Observability – correlation context."""
from flagkeeper.observability.correlation.context import CorrelationContext, RequestContext

__all__ = ["CorrelationContext", "RequestContext"]
