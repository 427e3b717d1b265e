"""
Logging module for artifact_store.

Import directly from sub-modules:
    from artifact_store.common.logging.setup import configure_logging
    from artifact_store.common.logging.utilities import get_logger, log_with_context
"""
