from __future__ import annotations

import asyncio
import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from api.modules.ranking.locks import SeasonLockRegistry


class TestSeasonLockRegistry(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = SeasonLockRegistry()

    def test_holders_of_one_season_run_one_at_a_time(self) -> None:
        events: list[str] = []

        async def _hold(name: str) -> None:
            async with self.registry.hold("2024-05"):
                events.append(f"{name}-in")
                await asyncio.sleep(0)
                events.append(f"{name}-out")

        async def _run() -> None:
            await asyncio.gather(_hold("a"), _hold("b"))

        asyncio.run(_run())
        self.assertEqual(events, ["a-in", "a-out", "b-in", "b-out"])

    def test_other_seasons_are_not_blocked(self) -> None:
        async def _run() -> None:
            async with self.registry.hold("2024-05"):
                self.assertTrue(self.registry.is_locked("2024-05"))
                async with self.registry.hold("2024-06"):
                    self.assertEqual(len(self.registry), 2)

        asyncio.run(_run())
        self.assertFalse(self.registry.is_locked("2024-05"))

    def test_locks_are_dropped_once_released(self) -> None:
        async def _run() -> None:
            for year in range(2000, 2050):
                async with self.registry.hold(f"{year}-01"):
                    pass

        asyncio.run(_run())
        self.assertEqual(len(self.registry), 0)

    def test_cancelled_waiter_gives_up_its_claim(self) -> None:
        async def _enter() -> None:
            async with self.registry.hold("2024-05"):
                pass

        async def _run() -> None:
            async with self.registry.hold("2024-05"):
                waiter = asyncio.create_task(_enter())
                await asyncio.sleep(0)
                waiter.cancel()
                with self.assertRaises(asyncio.CancelledError):
                    await waiter
                self.assertEqual(len(self.registry), 1)
            self.assertEqual(len(self.registry), 0)

        asyncio.run(_run())


if __name__ == "__main__":
    unittest.main()
