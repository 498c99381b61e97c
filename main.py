#!/usr/bin/env python3
"""
PopeBot — Telegram Notifier
===========================
Turns assistant markdown into Telegram HTML, splits it under the
4096-character limit and delivers the parts in order.

Usage:
  python main.py format "**hello** _world_"
  python main.py send "Build finished" --chat-id 123456
  python main.py notify-job --job-id 1a2b3c4d5e --summary "Done" --pr-url https://github.com/o/r/pull/1
"""

from core.app import main

if __name__ == "__main__":
    raise SystemExit(main())
