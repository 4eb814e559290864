"""Simulated live prices pushed to WebSocket clients."""

import asyncio
import logging
import random
from datetime import datetime, UTC
from typing import List, Optional

logger = logging.getLogger(__name__)

PRICE_EVENT = "liveStockUpdate"


class PriceFeedBroadcaster:
    """Periodically broadcasts a random price for a random symbol."""

    def __init__(self, manager, symbols: List[str], interval: float = 3.0, rng: Optional[random.Random] = None):
        self.manager = manager
        self.symbols = symbols
        self.interval = interval
        self.rng = rng or random.Random()
        self.running = False
        self.ticks_sent = 0

    def generate_tick(self) -> dict:
        return {
            "event": PRICE_EVENT,
            "data": {
                "symbol": self.rng.choice(self.symbols),
                "price": round(self.rng.uniform(100, 200), 2),
                "timestamp": datetime.now(UTC).isoformat(),
            },
        }

    async def publish_once(self) -> dict:
        tick = self.generate_tick()
        await self.manager.broadcast(tick)
        self.ticks_sent += 1
        return tick

    async def run(self) -> None:
        self.running = True
        logger.info(f"Starting price feed for {len(self.symbols)} symbols every {self.interval}s")

        try:
            while self.running:
                await asyncio.sleep(self.interval)
                if self.manager.active_connections:
                    await self.publish_once()
        finally:
            logger.info(f"Price feed stopped after {self.ticks_sent} ticks")

    async def stop(self) -> None:
        logger.info("Stopping price feed")
        self.running = False
