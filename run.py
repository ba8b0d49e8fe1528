#!/usr/bin/env python3
"""
Money Savings System Entry Point

Starts the FastAPI server for the in-memory savings ledger.
"""

import sys

from savings_ledger.api import run_server
from savings_ledger.config import get_config


if __name__ == "__main__":
    config = get_config()
    print("💰 Starting Money Savings System...")
    print(f"💱 Ledger currency: {config.currency}")
    print("⚠️  All balances are held in memory and are lost on restart")
    print(f"🌐 API available at: http://localhost:{config.api_port}")
    print(f"📚 Documentation at: http://localhost:{config.api_port}/docs")
    print()

    try:
        run_server()
    except KeyboardInterrupt:
        print("\n👋 Shutting down Money Savings System...")
    except Exception as e:
        print(f"❌ Error starting server: {e}")
        sys.exit(1)
