"""Logging constants and defaults."""

import logging

PACKAGE_LOGGER = "artifact_store"
DEFAULT_LEVEL = logging.INFO

# Backend loggers that flood DEBUG output with wire detail
NOISY_LOGGERS = [
    "boto3",
    "botocore",
    "s3transfer",
    "urllib3",
]
