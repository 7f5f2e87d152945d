"""
defaults_store — Hello World

Typed settings backed by a store, with change streams that start from
the current value and follow every later write in the process.
"""

import asyncio
import logging

from pydantic import BaseModel

from defaults_store import DefaultsKey, DefaultsManager, StoreConfig, create_store


class Appearance(BaseModel):
    theme: str = "light"
    font_scale: float = 1.0


async def watch(manager: DefaultsManager) -> None:
    async with await manager.codable(Appearance, DefaultsKey.APPEARANCE).subscribe() as changes:
        async for appearance in changes:
            print(f"  [appearance] {appearance}")
            if appearance is None:
                break


async def main():
    logging.basicConfig(level=logging.INFO)

    # ──────────────────────────────────────
    #  1. Wire a store (memory here; sqlite persists)
    # ──────────────────────────────────────
    manager = DefaultsManager(store=create_store(StoreConfig(type="memory")))

    # ──────────────────────────────────────
    #  2. Primitive settings
    # ──────────────────────────────────────
    launches = manager.defaults(DefaultsKey.LAUNCH_COUNT)
    await launches.set((await launches.get() or 0) + 1)
    print(f"Launch count: {await launches.get()}")

    # ──────────────────────────────────────
    #  3. Structured settings + a live subscriber
    # ──────────────────────────────────────
    appearance = manager.codable(Appearance, DefaultsKey.APPEARANCE)
    await appearance.set(Appearance(theme="dark"))

    watcher = asyncio.create_task(watch(manager))
    await asyncio.sleep(0)

    await appearance.set(Appearance(theme="dark", font_scale=1.25))

    # ──────────────────────────────────────
    #  4. Sign-out: clear everything
    # ──────────────────────────────────────
    await manager.remove_all()
    await watcher

    print(f"Launch count after reset: {await launches.get()}")
    await manager.close()


if __name__ == "__main__":
    asyncio.run(main())
