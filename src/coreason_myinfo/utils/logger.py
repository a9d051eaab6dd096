# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_myinfo

import logging
import os
import re
import sys
from pathlib import Path
from typing import Any

from loguru import logger
from opentelemetry import trace

__all__ = ["logger", "configure_logging", "mask_uinfin", "redact_message"]

# NRIC/FIN: prefix letter, seven digits, checksum letter
UINFIN_PATTERN = re.compile(r"\b([STFGM])(\d{7})([A-Z])\b")
BEARER_PATTERN = re.compile(r"(Bearer\s+)[A-Za-z0-9\-_.~+/]+=*")
SIGNATURE_PATTERN = re.compile(r'(signature=")[^"]*(")')


class InterceptHandler(logging.Handler):
    """
    Redirects standard logging messages (e.g. from httpx) to Loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk back to the frame that actually issued the log call
        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename in (logging.__file__, __file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def trace_id_injector(record: dict[str, Any]) -> None:
    """
    Loguru patcher that adds the current OpenTelemetry trace_id and span_id to `extra`.
    """
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        record["extra"]["trace_id"] = format(ctx.trace_id, "032x")
        record["extra"]["span_id"] = format(ctx.span_id, "016x")


def mask_uinfin(uinfin: str) -> str:
    """
    Masks a UIN/FIN for logging, keeping the prefix letter and the last four characters.

    Examples:
        >>> mask_uinfin("S1234567A")
        'S****567A'
    """
    if len(uinfin) <= 5:
        return "*" * len(uinfin)
    return f"{uinfin[0]}{'*' * (len(uinfin) - 5)}{uinfin[-4:]}"


def redact_message(message: str) -> str:
    """
    Scrubs bearer tokens, PKI_SIGN signatures and unmasked UIN/FINs from a log message.

    httpx and other libraries log through the stdlib intercept with request details
    this package does not control, so redaction happens on every record.
    """
    message = BEARER_PATTERN.sub(r"\1<REDACTED>", message)
    message = SIGNATURE_PATTERN.sub(r"\1<REDACTED>\2", message)
    return UINFIN_PATTERN.sub(lambda m: mask_uinfin(m.group(0)), message)


def record_patcher(record: dict[str, Any]) -> None:
    """
    Loguru patcher applied to every record: redacts the message, then adds trace ids.
    """
    record["message"] = redact_message(record["message"])
    trace_id_injector(record)


def configure_logging() -> None:
    """
    Configures the logger from COREASON_LOG_LEVEL and COREASON_LOG_JSON.
    Call again to reload configuration if the env vars change.
    """
    log_level = os.getenv("COREASON_LOG_LEVEL", "INFO").upper()
    log_json = os.getenv("COREASON_LOG_JSON", "false").lower() == "true"

    try:
        logger.level(log_level)
    except ValueError:
        log_level = "INFO"

    logger.configure(handlers=[], patcher=record_patcher)  # type: ignore[arg-type]

    if log_json:
        logger.add(sys.stdout, level=log_level, serialize=True)
    else:
        logger.add(
            sys.stderr,
            level=log_level,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
                "<level>{message}</level>"
            ),
        )

    # File sink is always JSON. Skipped on read-only filesystems.
    try:
        Path("logs").mkdir(parents=True, exist_ok=True)
        logger.add(
            "logs/app.log",
            rotation="500 MB",
            retention="10 days",
            serialize=True,
            enqueue=True,
            level=log_level,
        )
    except (PermissionError, OSError):
        pass

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    numeric_level = logging.getLevelName(log_level)
    logging.getLogger().setLevel(numeric_level if isinstance(numeric_level, int) else logging.INFO)


configure_logging()
