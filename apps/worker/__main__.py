"""
Worker Module Entry Point

Allows execution via: python -m apps.worker
"""

import asyncio

from apps.worker.consumer import main

if __name__ == "__main__":
    asyncio.run(main())
