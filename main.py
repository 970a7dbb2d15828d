"""
Nova Assistant — Entry Point.

Single entry point: `python main.py` starts the console chat.
"""

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from nova.bot.console import main

if __name__ == "__main__":
    main()
