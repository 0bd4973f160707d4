"""
Configuration for the receipt processor. Process-level settings are read from
the environment once at import; per-app settings live on DefaultConfig and can
be overridden with RECEIPTS_<KEY> environment variables.
"""

import os

HOST = os.getenv("RECEIPTS_HOST", "0.0.0.0")
PORT = int(os.getenv("RECEIPTS_PORT", "5000"))


class DefaultConfig:
    # when on, a receipt with the same retailer, date and time as an earlier one
    # gets the earlier receipt's id back instead of a new one
    DUPLICATE_DETECTION = False
    LOG_LEVEL = "INFO"
