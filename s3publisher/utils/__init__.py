"""
Utility modules for the S3 bucket publisher.

- logging: Structured logging with entry/exit decorators
- config: Environment settings
- config_loader: YAML profile and publish-step files
- macros: ${VAR} expansion
- metrics: Prometheus instrumentation
"""

from s3publisher.utils.logging import get_logger, log_function_call

__all__ = ["get_logger", "log_function_call"]
