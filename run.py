#!/usr/bin/env python3
"""
Banking Ledger Entry Point

Starts the FastAPI server on port 8090 with the ledger store configured
from LEDGER_* environment variables.
"""

import sys

from banking_ledger.api import run_server


if __name__ == "__main__":
    print("Starting Banking Ledger API...")
    print("API available at: http://localhost:8090")
    print("Documentation at: http://localhost:8090/docs")
    print()

    try:
        run_server(
            host="0.0.0.0",
            port=8090,
            debug=False
        )
    except KeyboardInterrupt:
        print("\nShutting down Banking Ledger API...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
