"""
Structured logging configuration.

All dispatcher modules log through structlog. Records are routed into the
stdlib logging tree so that vendor SDK loggers (openai, anthropic, httpx)
share one handler and one output format.
"""

import logging
import sys
from typing import Any, List

import structlog

# Vendor loggers that are chatty at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic")


def _shared_processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def setup_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """
    Configure structured logging for the dispatcher.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON lines instead of console key/value output
    """
    level = getattr(logging, log_level.upper())
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_shared_processors(),
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=_shared_processors()
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structured logger
    """
    return structlog.get_logger(name)


def log_request_queued(
    request_id: str, model: str, priority: str, **kwargs: Any
) -> None:
    """
    Log a request entering the dispatch queue.

    Args:
        request_id: Request identifier
        model: Target model ID
        priority: Request priority
        **kwargs: Additional context
    """
    logger = get_logger("dispatcher")
    logger.info(
        "request_queued",
        request_id=request_id,
        model=model,
        priority=priority,
        **kwargs,
    )


def log_cache_hit(prompt: str, request_id: str, **kwargs: Any) -> None:
    """
    Log cache hit.

    Args:
        prompt: Prompt text
        request_id: Request identifier the hit was served for
        **kwargs: Additional context
    """
    logger = get_logger("cache")
    logger.info("cache_hit", prompt=prompt[:100], request_id=request_id, **kwargs)


def log_cache_miss(prompt: str, **kwargs: Any) -> None:
    """
    Log cache miss.

    Args:
        prompt: Prompt text
        **kwargs: Additional context
    """
    logger = get_logger("cache")
    logger.info("cache_miss", prompt=prompt[:100], **kwargs)


def log_llm_call(provider: str, model: str, tokens: int, **kwargs: Any) -> None:
    """
    Log LLM API call.

    Args:
        provider: LLM provider name
        model: Model name
        tokens: Total tokens used
        **kwargs: Additional context
    """
    logger = get_logger("llm")
    logger.info("llm_call", provider=provider, model=model, tokens=tokens, **kwargs)


def log_error(error: Exception, context: str, **kwargs: Any) -> None:
    """
    Log error with context.

    Args:
        error: Exception that occurred
        context: Error context
        **kwargs: Additional context
    """
    logger = get_logger("error")
    logger.error(
        "error_occurred",
        error=str(error),
        error_type=type(error).__name__,
        context=context,
        **kwargs
    )
