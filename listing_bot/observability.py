"""Structured JSON logging and OpenTelemetry tracing for the interactions function."""
import os
import logging
import json
import traceback
import uuid
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from functools import wraps

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.cloud_trace import CloudTraceSpanExporter
from opentelemetry.instrumentation.flask import FlaskInstrumentor
from opentelemetry.instrumentation.requests import RequestsInstrumentor

SERVICE_NAME = 'listing-bot'


class StructuredLogger:
    """Logger that emits one JSON object per line."""

    def __init__(self, service_name: str = SERVICE_NAME):
        self.service_name = service_name
        self.logger = self._setup_logger()

    def _setup_logger(self):
        logger = logging.getLogger(self.service_name)
        logger.setLevel(logging.INFO)
        logger.propagate = False
        if not any(isinstance(h.formatter, JsonFormatter) for h in logger.handlers):
            handler = logging.StreamHandler()
            handler.setFormatter(JsonFormatter())
            logger.addHandler(handler)
        return logger

    def _get_trace_context(self) -> Dict[str, str]:
        span = trace.get_current_span()
        if span and span.is_recording():
            span_context = span.get_span_context()
            return {
                "trace_id": format(span_context.trace_id, '032x'),
                "span_id": format(span_context.span_id, '016x')
            }
        return {}

    def _build_log_entry(self, message: str, level: str, correlation_id: Optional[str] = None, **extra) -> Dict[str, Any]:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": level,
            "service": self.service_name,
            "message": message,
        }
        entry.update(self._get_trace_context())
        if correlation_id:
            entry["correlation_id"] = correlation_id
        entry.update(extra)
        return entry

    def _emit(self, level: int, entry: Dict[str, Any]):
        self.logger.log(level, json.dumps(entry, default=str))

    def info(self, message: str, **kwargs):
        """Log INFO level."""
        self._emit(logging.INFO, self._build_log_entry(message, "INFO", **kwargs))

    def warning(self, message: str, **kwargs):
        """Log WARNING level."""
        self._emit(logging.WARNING, self._build_log_entry(message, "WARNING", **kwargs))

    def error(self, message: str, error: Optional[BaseException] = None, **kwargs):
        """Log ERROR level, attaching exception details when given."""
        if error is not None:
            kwargs["error"] = {
                "type": type(error).__name__,
                "message": str(error),
                "stacktrace": ''.join(traceback.format_exception(type(error), error, error.__traceback__))
            }
        self._emit(logging.ERROR, self._build_log_entry(message, "ERROR", **kwargs))

    def debug(self, message: str, **kwargs):
        """Log DEBUG level."""
        self._emit(logging.DEBUG, self._build_log_entry(message, "DEBUG", **kwargs))


class JsonFormatter(logging.Formatter):
    """Pass through pre-rendered JSON, wrap anything else."""

    def format(self, record):
        if isinstance(record.msg, str) and record.msg.startswith('{'):
            return record.msg

        return json.dumps({
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "severity": record.levelname,
            "message": record.getMessage(),
        })


def get_logger(component: Optional[str] = None) -> StructuredLogger:
    """Return a structured logger, namespaced under the service name."""
    if component:
        return StructuredLogger(f"{SERVICE_NAME}.{component}")
    return StructuredLogger(SERVICE_NAME)


class TracingManager:
    """OpenTelemetry tracer provider setup."""

    def __init__(self, service_name: str, environment: str = "production"):
        self.service_name = service_name
        self.environment = environment
        self.tracer = self._setup_tracer()

    def _setup_tracer(self):
        resource = Resource.create({
            "service.name": self.service_name,
            "service.namespace": "server-listing",
            "deployment.environment": self.environment,
        })
        tracer_provider = TracerProvider(resource=resource)

        # Cloud Trace export is off for local runs
        if not os.getenv("LOCAL_DEV"):
            try:
                exporter = CloudTraceSpanExporter(project_id=os.getenv('GCP_PROJECT_ID'))
                tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
            except Exception as e:
                get_logger('tracing').warning("Could not set up Cloud Trace exporter", error=str(e))

        trace.set_tracer_provider(tracer_provider)
        return trace.get_tracer(self.service_name)

    def instrument_flask(self, app):
        """Auto-instrument a Flask application."""
        try:
            FlaskInstrumentor().instrument_app(app)
        except Exception as e:
            get_logger('tracing').warning("Could not instrument Flask", error=str(e))

    def instrument_requests(self):
        """Auto-instrument the requests library used for Discord and store calls."""
        try:
            RequestsInstrumentor().instrument()
        except Exception as e:
            get_logger('tracing').warning("Could not instrument requests", error=str(e))


def init_observability(service_name: str = SERVICE_NAME, app=None, environment: str = None):
    """Initialize logging and tracing for the function.

    Args:
        service_name: Name reported in log entries and trace resources
        app: Flask app instance to instrument (optional)
        environment: Deployment environment, defaults to $ENVIRONMENT

    Returns:
        tuple: (logger, tracing_manager)
    """
    if environment is None:
        environment = os.getenv('ENVIRONMENT', 'production')

    logger = StructuredLogger(service_name)
    tracing = TracingManager(service_name, environment)

    if app is not None:
        tracing.instrument_flask(app)
    tracing.instrument_requests()

    logger.info("Observability initialized", environment=environment)
    return logger, tracing


def traced_function(operation_name: Optional[str] = None):
    """Decorator that runs the wrapped function inside an OpenTelemetry span.

    Usage:
        @traced_function("bump_command")
        def handle_bump(context, interaction):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            tracer = trace.get_tracer(__name__)
            op_name = operation_name or func.__name__

            with tracer.start_as_current_span(op_name) as span:
                span.set_attribute("function.name", func.__name__)
                span.set_attribute("function.module", func.__module__)
                try:
                    result = func(*args, **kwargs)
                    span.set_attribute("function.status", "success")
                    return result
                except Exception as e:
                    span.set_attribute("function.status", "error")
                    span.set_attribute("error.type", type(e).__name__)
                    span.record_exception(e)
                    raise

        return wrapper
    return decorator


def get_correlation_id(request=None) -> str:
    """Get the correlation ID from request headers, or generate one.

    Checks X-Correlation-ID, then X-Request-ID, then falls back to a new UUID.
    """
    if request is not None:
        return (
            request.headers.get('X-Correlation-ID') or
            request.headers.get('X-Request-ID') or
            str(uuid.uuid4())
        )
    return str(uuid.uuid4())
