"""
Example 1: Simple Trading

This example shows:
- Browsing markets and the order book
- Quoting and placing a limit order
- Listing and cancelling your orders

Set VEIL_PRIVATE_KEY (or VEIL_MNEMONIC) and VEIL_MARKET_SLUG before running.
Point VEIL_API_URL at mainnet to trade for real; the default is the Kovan testnet.
"""

import asyncio
import os
from decimal import Decimal

from veil import VeilClient, WalletConfig, setup_logging
from veil.utils.numeric import from_base_units, from_price_ticks, from_share_units


async def main():
    """Simple trading example."""

    setup_logging(level="INFO")

    # 1. Configure wallet
    private_key = os.getenv("VEIL_PRIVATE_KEY")
    mnemonic = os.getenv("VEIL_MNEMONIC")
    if not (private_key or mnemonic):
        raise ValueError("Set VEIL_PRIVATE_KEY or VEIL_MNEMONIC environment variable")

    slug = os.getenv("VEIL_MARKET_SLUG")
    if not slug:
        raise ValueError("Set VEIL_MARKET_SLUG environment variable")

    wallet = WalletConfig(private_key=private_key, mnemonic=None if private_key else mnemonic)

    async with VeilClient.from_wallet(wallet) as client:
        print(f"✓ Client ready for {client.address}")

        # 2. Read-only market data (no session needed)
        markets = await client.get_markets(status="open")
        print(f"✓ {len(markets)} open markets")

        market = await client.get_market(slug)
        print(f"✓ Market {market.slug}: {market.num_ticks} ticks")

        if market.is_scalar:
            low, high = client.get_scalar_range(market)
            print(f"  Scalar range: {low} - {high}")

        for order in await client.get_order_book(market):
            price = from_price_ticks(order.long_price, market.num_ticks)
            amount = from_share_units(order.token_amount, market.num_ticks)
            print(f"  {order.long_side.value:4} {amount} @ {price}")

        # 3. Quote and place a limit order (authenticates on first use)
        quote = await client.create_quote(
            market,
            side="buy",
            token_type="long",
            amount=Decimal("1"),
            price=Decimal("0.50")
        )
        print(f"✓ Quote {quote.uid}")

        order = await client.create_order(quote, post_only=True)
        print(f"✓ Order {order.uid}: {order.status}")

        # 4. Review and cancel
        for user_order in await client.get_user_orders(market):
            filled = from_share_units(user_order.token_amount_filled or "0", market.num_ticks)
            print(f"  {user_order.uid} {user_order.status} filled={filled}")

        canceled = await client.cancel_order(order.uid)
        print(f"✓ Order {canceled.uid} {canceled.status}")

        if market.limit_price:
            print(f"  Limit price: {from_base_units(market.limit_price)}")


if __name__ == "__main__":
    asyncio.run(main())
