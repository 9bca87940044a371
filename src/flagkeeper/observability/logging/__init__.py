"""Observability – structured logging helpers."""
from flagkeeper.observability.logging.factory import JsonLoggerFactory
from flagkeeper.observability.logging.processors import CorrelationProcessor, get_logger

__all__ = ["CorrelationProcessor", "JsonLoggerFactory", "get_logger"]
