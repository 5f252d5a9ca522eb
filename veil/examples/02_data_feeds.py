"""
Example 2: Data Feeds

Scalar markets resolve against index data feeds served by a separate host.
This example reads a feed without any wallet.

Set VEIL_DATA_FEED (for example "BTCUSD") before running.
"""

import asyncio
import os

from veil import VeilClient
from veil.utils.numeric import from_base_units
from veil.utils.structured_logging import configure_structured_logging, set_correlation_id


async def main():
    """Data feed example."""

    # JSON logs with correlation ids, credentials redacted
    configure_structured_logging(level="INFO", enable_json=True)
    set_correlation_id()

    name = os.getenv("VEIL_DATA_FEED", "BTCUSD")

    async with VeilClient() as client:
        feed = await client.get_data_feed(name, scope="day")
        print(f"✓ {feed.name}: {feed.description} ({feed.denomination})")

        for entry in feed.entries[-10:]:
            print(f"  {entry.timestamp}: {from_base_units(entry.value)}")

        markets = await client.get_markets(index=name, status="open")
        for market in markets:
            if market.is_scalar:
                low, high = client.get_scalar_range(market)
                print(f"  {market.slug}: {low} - {high}")


if __name__ == "__main__":
    asyncio.run(main())
