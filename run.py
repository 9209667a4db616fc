#!/usr/bin/env python3
"""
Branch Ledger Entry Point

Starts the console shell, or the FastAPI server with --serve.
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from branch_ledger.api import run_server
from branch_ledger.cli import main as run_console
from branch_ledger.config import get_config


if __name__ == "__main__":
    if "--serve" not in sys.argv[1:]:
        run_console()
        sys.exit(0)

    config = get_config()
    print("Starting Branch Ledger API...")
    print(f"API available at: http://{config.api_host}:{config.api_port}")
    print(f"Documentation at: http://{config.api_host}:{config.api_port}/docs")
    print()

    try:
        run_server(debug="--debug" in sys.argv[1:])
    except KeyboardInterrupt:
        print("\nShutting down Branch Ledger API...")
    except Exception as e:
        print(f"Error starting server: {e}")
        sys.exit(1)
