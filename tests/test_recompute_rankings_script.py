from __future__ import annotations

import asyncio
import importlib.util
import sys
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest.mock import patch
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, select

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from api.db.enums import TeamSide
from api.db.models import Match, Player, PlayerRanking

_spec = importlib.util.spec_from_file_location(
    "recompute_rankings", ROOT / "scripts" / "recompute_rankings.py"
)
assert _spec is not None and _spec.loader is not None
recompute_rankings = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(recompute_rankings)


class TestRecomputeRankingsScript(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.tmpdir = tempfile.TemporaryDirectory()
        db_path = Path(cls.tmpdir.name) / "recompute_script.db"
        cls.engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", echo=False)
        cls.sessionmaker = async_sessionmaker(
            bind=cls.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

        async def _seed() -> None:
            async with cls.engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
            async with cls.sessionmaker() as session:
                players = [Player(name=f"script-{idx}") for idx in range(4)]
                session.add_all(players)
                for season_day, month in ((3, 1), (4, 2)):
                    session.add(
                        Match(
                            id=uuid4(),
                            season=f"2022-0{month}",
                            team_a_player1_id=players[0].id,
                            team_a_player2_id=players[1].id,
                            team_b_player1_id=players[2].id,
                            team_b_player2_id=players[3].id,
                            score_a=21,
                            score_b=9,
                            winner=TeamSide.A,
                            played_at=datetime(2022, month, season_day, 20, 0),
                        )
                    )
                await session.commit()

        asyncio.run(_seed())

    @classmethod
    def tearDownClass(cls) -> None:
        async def _dispose() -> None:
            await cls.engine.dispose()

        asyncio.run(_dispose())
        cls.tmpdir.cleanup()

    def test_recompute_all_seasons(self) -> None:
        with patch("api.db.session.get_sessionmaker", return_value=self.sessionmaker):
            results = asyncio.run(recompute_rankings.recompute([], all_seasons=True))

        self.assertEqual(results, [("2022-02", 4, 2), ("2022-01", 4, 2)])

        async def _count() -> int:
            async with self.sessionmaker() as session:
                rows = await session.execute(select(PlayerRanking))
                return len(rows.scalars().all())

        self.assertEqual(asyncio.run(_count()), 8)

    def test_invalid_season_is_rejected(self) -> None:
        with patch("api.db.session.get_sessionmaker", return_value=self.sessionmaker):
            with self.assertRaises(ValueError):
                asyncio.run(recompute_rankings.recompute(["2022/01"], all_seasons=False))


if __name__ == "__main__":
    unittest.main()
