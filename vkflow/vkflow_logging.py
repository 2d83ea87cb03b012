"""Logging and observability utilities for vkflow.

This module provides structured logging, performance monitoring,
and event hooks for the import and seeding workflows.
"""

from __future__ import annotations

import json
import time
import logging as std_logging
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union


def setup_logging(log_level: Union[str, int] = std_logging.INFO, log_file: Optional[Path] = None) -> None:
    """Setup structured logging for vkflow."""
    if isinstance(log_level, str):
        log_level = log_level.upper()

    logger = std_logging.getLogger("vkflow")
    logger.setLevel(log_level)
    logger.handlers.clear()

    detailed_formatter = std_logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = std_logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(detailed_formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = std_logging.FileHandler(log_file)
        file_handler.setLevel(std_logging.DEBUG)
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)
        # The file captures everything; the console keeps the requested level.
        logger.setLevel(std_logging.DEBUG)

    logger.debug("vkflow logging initialized")


class JsonFormatter(std_logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: std_logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry, default=str)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class PerformanceMonitor:
    """Collect timing metrics for vkflow operations."""

    def __init__(self):
        self.metrics: Dict[str, List[Dict[str, Any]]] = {}

    def record_metric(self, name: str, value: Any, tags: Optional[Dict[str, str]] = None) -> None:
        metric = {
            "timestamp": _utc_now(),
            "name": name,
            "value": value,
            "tags": tags or {}
        }
        self.metrics.setdefault(name, []).append(metric)

        logger = std_logging.getLogger("vkflow.performance")
        logger.debug(f"Metric recorded: {name}={value}", extra={"extra_fields": metric})

    def get_metrics(self, name: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
        if name:
            return {name: self.metrics.get(name, [])}
        return self.metrics.copy()

    def clear(self) -> None:
        self.metrics.clear()


performance_monitor = PerformanceMonitor()


def _failure_fields(error: Exception) -> Dict[str, str]:
    return {"error_type": type(error).__name__, "error_message": str(error)}


def log_performance(operation_name: str):
    """Decorator recording ``<operation_name>_duration`` for every call."""
    metric_name = f"{operation_name}_duration"

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = std_logging.getLogger("vkflow.performance")
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - started
                performance_monitor.record_metric(
                    metric_name, duration, {"status": "error", "error_type": type(e).__name__}
                )
                logger.debug(
                    f"{operation_name} failed after {duration:.3f}s",
                    extra={"extra_fields": {"operation": operation_name, "duration": duration,
                                            "status": "error", **_failure_fields(e)}},
                )
                raise

            duration = time.perf_counter() - started
            performance_monitor.record_metric(metric_name, duration, {"status": "success"})
            logger.debug(
                f"{operation_name} took {duration:.3f}s",
                extra={"extra_fields": {"operation": operation_name, "duration": duration, "status": "success"}},
            )
            return result

        return wrapper
    return decorator


@contextmanager
def log_operation(operation_name: str, **extra_fields):
    """Log start, completion or failure of a block, tagged with ``extra_fields``."""
    logger = std_logging.getLogger("vkflow.operations")
    fields = {"operation": operation_name, **extra_fields}
    started = time.perf_counter()

    logger.info(f"Starting operation: {operation_name}", extra={"extra_fields": {**fields, "status": "started"}})
    try:
        yield
    except Exception as e:
        duration = time.perf_counter() - started
        logger.error(
            f"Failed operation: {operation_name} after {duration:.3f}s - {e}",
            extra={"extra_fields": {**fields, "status": "failed", "duration": duration, **_failure_fields(e)}},
        )
        raise

    duration = time.perf_counter() - started
    logger.info(
        f"Completed operation: {operation_name} in {duration:.3f}s",
        extra={"extra_fields": {**fields, "status": "completed", "duration": duration}},
    )


class ObservabilityHooks:
    """Callbacks fired on vkflow workflow events."""

    def __init__(self):
        self.hooks: Dict[str, List[Callable[..., Any]]] = {}
        self.logger = std_logging.getLogger("vkflow.observability")

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        self.hooks.setdefault(event_type, []).append(callback)
        self.logger.debug(f"Registered hook for event: {event_type}")

    def unregister_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        callbacks = self.hooks.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def trigger_hooks(self, event_type: str, **data) -> None:
        for hook in list(self.hooks.get(event_type, [])):
            try:
                hook(**data)
            except Exception as e:
                self.logger.error(f"Hook failed for event {event_type}: {e}")

    def log_workflow_event(self, event_type: str, change: Optional[str] = None, **data) -> None:
        """Log a workflow event and trigger hooks."""
        event_data = {
            "timestamp": _utc_now(),
            "event_type": event_type,
            "change": change,
            **data
        }
        self.logger.info(f"Workflow event: {event_type}", extra={"extra_fields": event_data})

        hook_data = {k: v for k, v in event_data.items() if k != "event_type"}
        self.trigger_hooks(event_type, **hook_data)


observability_hooks = ObservabilityHooks()


def log_error_with_context(error: Exception, context: Dict[str, Any], **extra_fields):
    """Log an error with rich context information."""
    logger = std_logging.getLogger("vkflow.errors")

    error_data = {"timestamp": _utc_now(), **_failure_fields(error), "context": context, **extra_fields}

    logger.error(
        f"Error in {context.get('operation', 'unknown operation')}: {error}",
        extra={"extra_fields": error_data},
        exc_info=error
    )


def log_task_created(change: str, task_id: str, title: str, **extra_fields):
    observability_hooks.log_workflow_event("task_created", change=change, task_id=task_id, title=title, **extra_fields)


def log_task_skipped(change: str, task_id: str, title: str, **extra_fields):
    observability_hooks.log_workflow_event("task_skipped", change=change, task_id=task_id, title=title, **extra_fields)


def log_tag_upserted(tag_name: str, action: str, **extra_fields):
    observability_hooks.log_workflow_event("tag_upserted", tag_name=tag_name, action=action, **extra_fields)


def log_change_imported(change: str, created: int, skipped: int, **extra_fields):
    observability_hooks.log_workflow_event(
        "change_imported", change=change, created=created, skipped=skipped, **extra_fields
    )


def log_plan_task_created(change: str, **extra_fields):
    observability_hooks.log_workflow_event("plan_task_created", change=change, **extra_fields)
