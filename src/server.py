"""Protean Engine runner for the storefront domain.

Only needed when event processing is asynchronous (the production overlay):
the Engine then delivers Order events to the projectors and the notification
handler.

Usage:
    PROTEAN_ENV=production python src/server.py
"""

import asyncio

from protean.server.engine import Engine


async def run():
    from storefront.domain import storefront

    storefront.init()
    await Engine(storefront).run()


def main():
    asyncio.run(run())


if __name__ == "__main__":
    main()
