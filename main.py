"""Example usage of line_influx package."""

import asyncio
import logging

from line_influx import Influx


async def main():
    """Number the lines piped into standard input."""
    logging.basicConfig(level=logging.INFO)

    # Reader thread fills the buffer while we pull at our own pace
    with Influx.stdin({"trim": True}) as influx:
        count = 0
        async for line in influx:
            count += 1
            print(f"{count:>5} {line}")

    print(f"{count} line(s) read")


if __name__ == "__main__":
    asyncio.run(main())
