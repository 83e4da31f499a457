#!/usr/bin/env python3
"""
Delete expired login sessions.

Expired sessions are already rejected on every request; this only keeps
the sessions table small. Suitable for a cron job when the in-process
scheduler is disabled.

Usage:
    ENV=production python scripts/purge_expired_sessions.py
"""

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

env = os.getenv("ENV", "local")
load_dotenv(f".env.{env}")

from checkin.services.scheduler import SchedulerService


def main():
    removed = asyncio.run(SchedulerService(interval=0).purge_once())
    print(f"Purged {removed} expired session(s)")


if __name__ == "__main__":
    main()
