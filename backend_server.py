#!/usr/bin/env python3
"""
Standalone entry point for the reconciliation API server.
"""
import argparse

import uvicorn

from receivables.config import get_settings
from receivables.utils import setup_logging


def main():
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Receivables reconciliation API")
    parser.add_argument("--host", default=settings.host, help="Interface to bind")
    parser.add_argument("--port", type=int, default=settings.port, help="Port to run the server on")
    args = parser.parse_args()

    setup_logging()

    from receivables.api import app

    uvicorn.run(app, host=args.host, port=args.port, log_level=settings.app_log_level.lower())


if __name__ == "__main__":
    main()
