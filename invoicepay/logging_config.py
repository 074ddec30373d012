import logging
import sys

import structlog


def configure_logging(level: str = "info", json_output: bool = False) -> None:
    """Configure structlog for console or JSON line output."""
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def bind_invoice_id(invoice_id: str) -> None:
    """Bind invoice_id to the structlog context for correlation."""
    structlog.contextvars.bind_contextvars(invoice_id=invoice_id)


def clear_invoice_context() -> None:
    """Clear the invoice context after verification."""
    structlog.contextvars.unbind_contextvars("invoice_id")
