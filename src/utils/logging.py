"""
Shared logger for the cycle tracker Lambdas.

Tracebacks are folded onto one line so a CloudWatch Insights query can
match a whole failure by its request id.
"""
import os
from aws_lambda_powertools import Logger
from aws_lambda_powertools.logging.formatter import LambdaPowertoolsFormatter

class SingleLineFormatter(LambdaPowertoolsFormatter):
    """Powertools JSON formatter with ' | '-separated tracebacks."""

    def formatException(self, ei) -> str:
        return super().formatException(ei).replace("\n", " | ").strip()

def build_logger(service: str = None) -> Logger:
    """
    Create a structured logger tagged with the stage and function name.

    Args:
        service: Service name, defaults to POWERTOOLS_SERVICE_NAME

    Returns:
        Powertools logger using SingleLineFormatter
    """
    tracker_logger = Logger(
        service=service or os.environ.get("POWERTOOLS_SERVICE_NAME", "cycle_tracker"),
        level=os.environ.get("LOG_LEVEL", "INFO"),
        log_uncaught_exceptions=True,
        logger_formatter=SingleLineFormatter(use_rfc3339=True)
    )
    tracker_logger.append_keys(
        stage=os.environ.get("STAGE", "dev"),
        function=os.environ.get("AWS_LAMBDA_FUNCTION_NAME")
    )
    return tracker_logger

logger = build_logger()
