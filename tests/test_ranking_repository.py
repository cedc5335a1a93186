from __future__ import annotations

import asyncio
import sys
import tempfile
import unittest
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from api.db.models import Player, PlayerRanking, TeamRanking
from api.modules.ranking.repository import RankingRepository, SnapshotReadConflictError


class TestRankingRepository(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        db_path = Path(self.tmpdir.name) / "ranking_repository.db"
        self.engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", echo=False)
        self.sessionmaker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self.players = [Player(name=f"repo-{idx}") for idx in range(2)]

        async def _init_db() -> None:
            async with self.engine.begin() as conn:
                await conn.run_sync(SQLModel.metadata.create_all)
            async with self.sessionmaker() as session:
                session.add_all(self.players)
                await session.commit()

        asyncio.run(_init_db())

    def tearDown(self) -> None:
        asyncio.run(self.engine.dispose())
        self.tmpdir.cleanup()

    def _rows(self, winner_wins: int) -> tuple[list[PlayerRanking], list[TeamRanking]]:
        first, second = self.players
        players = [
            PlayerRanking(
                season="2024-05",
                player_id=first.id,
                rank=1,
                win_rate=1.0,
                wins=winner_wins,
                total_games=winner_wins,
            ),
            PlayerRanking(
                season="2024-05",
                player_id=second.id,
                rank=2,
                win_rate=0.0,
                wins=0,
                total_games=winner_wins,
            ),
        ]
        low, high = sorted((first.id, second.id), key=str)
        teams = [
            TeamRanking(
                season="2024-05",
                player1_id=low,
                player2_id=high,
                rank=1,
                win_rate=1.0,
                wins=winner_wins,
                total_games=winner_wins,
            )
        ]
        return players, teams

    async def _replace_elsewhere(self, winner_wins: int) -> int:
        players, teams = self._rows(winner_wins)
        async with self.sessionmaker() as session:
            return await RankingRepository(session).replace_season_snapshots(
                season="2024-05",
                players=players,
                teams=teams,
            )

    def test_replace_bumps_snapshot_version(self) -> None:
        async def _run() -> tuple[int, int, int, int]:
            async with self.sessionmaker() as session:
                untouched = await RankingRepository(session).get_snapshot_version("2024-05")
            first = await self._replace_elsewhere(1)
            second = await self._replace_elsewhere(2)
            async with self.sessionmaker() as session:
                stored = await RankingRepository(session).get_snapshot_version("2024-05")
            return untouched, first, second, stored

        self.assertEqual(asyncio.run(_run()), (0, 1, 2, 2))

    def test_load_retries_when_a_replace_lands_between_reads(self) -> None:
        async def _run() -> tuple[int, list[PlayerRanking], list[TeamRanking]]:
            await self._replace_elsewhere(1)
            async with self.sessionmaker() as session:
                repository = RankingRepository(session)
                read_teams = repository.list_team_rankings
                replaced: list[int] = []

                async def _teams_after_replace(season: str) -> list[TeamRanking]:
                    if not replaced:
                        replaced.append(await self._replace_elsewhere(5))
                    return await read_teams(season)

                repository.list_team_rankings = _teams_after_replace  # type: ignore[method-assign]
                return await repository.load_season_snapshot("2024-05")

        version, players, teams = asyncio.run(_run())

        self.assertEqual(version, 2)
        self.assertEqual([row.wins for row in players], [5, 0])
        self.assertEqual([row.wins for row in teams], [5])

    def test_load_gives_up_when_snapshot_keeps_changing(self) -> None:
        async def _run() -> None:
            await self._replace_elsewhere(1)
            async with self.sessionmaker() as session:
                repository = RankingRepository(session)
                read_teams = repository.list_team_rankings

                async def _teams_after_replace(season: str) -> list[TeamRanking]:
                    await self._replace_elsewhere(3)
                    return await read_teams(season)

                repository.list_team_rankings = _teams_after_replace  # type: ignore[method-assign]
                await repository.load_season_snapshot("2024-05")

        with self.assertRaises(SnapshotReadConflictError):
            asyncio.run(_run())


if __name__ == "__main__":
    unittest.main()
