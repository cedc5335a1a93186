from __future__ import annotations

import asyncio
import sys
import unittest
from datetime import datetime
from pathlib import Path
from typing import cast
from uuid import UUID, uuid4

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from api.db.enums import TeamSide
from api.db.models import Match, PlayerRanking, TeamRanking
from api.modules.matches.repository import MatchesRepository
from api.modules.matches.schemas import MatchCreateRequest, MatchScoreUpdateRequest
from api.modules.matches.service import MatchesService, MatchMutation
from api.modules.ranking.locks import SeasonLockRegistry
from api.modules.ranking.repository import RankingRepository
from api.modules.ranking.schemas import RankingSnapshot
from api.modules.ranking.service import RankingService
from ladder.optimistic import OptimisticStore


class StoreUnavailable(RuntimeError):
    pass


class FakeMatchesRepository:
    def __init__(self, known_players: set[UUID]) -> None:
        self.known_players = known_players
        self.matches: dict[UUID, Match] = {}
        self.fail_writes = False

    async def create_match(self, match: Match) -> Match:
        if self.fail_writes:
            raise StoreUnavailable("insert failed")
        self.matches[match.id] = match
        return match

    async def get_match(self, match_id: UUID) -> Match | None:
        # Each read is a round trip; let other requests run.
        await asyncio.sleep(0)
        return self.matches.get(match_id)

    async def update_score(
        self,
        match: Match,
        *,
        score_a: int,
        score_b: int,
        winner: TeamSide,
    ) -> Match:
        if self.fail_writes:
            raise StoreUnavailable("update failed")
        if match.id not in self.matches:
            raise StoreUnavailable("row vanished")
        match.score_a = score_a
        match.score_b = score_b
        match.winner = winner
        return match

    async def delete_match(self, match: Match) -> None:
        if self.fail_writes:
            raise StoreUnavailable("delete failed")
        self.matches.pop(match.id, None)

    async def find_missing_players(self, player_ids: list[UUID]) -> list[UUID]:
        return [player_id for player_id in player_ids if player_id not in self.known_players]


class FakeRankingRepository:
    def __init__(self, matches_repo: FakeMatchesRepository) -> None:
        self.matches_repo = matches_repo
        self.replace_calls: list[str] = []
        self.load_calls: list[str] = []
        self.fail_replace = False
        self.versions: dict[str, int] = {}
        self.players_by_season: dict[str, list[PlayerRanking]] = {}
        self.teams_by_season: dict[str, list[TeamRanking]] = {}
        # When set, snapshot loads wait on it after reading their rows.
        self.read_gate: asyncio.Event | None = None

    async def list_season_matches(self, season: str) -> list[Match]:
        rows = [m for m in self.matches_repo.matches.values() if m.season == season]
        return sorted(rows, key=lambda m: (m.played_at, m.created_at, str(m.id)))

    async def get_snapshot_version(self, season: str) -> int:
        await asyncio.sleep(0)
        return self.versions.get(season, 0)

    async def replace_season_snapshots(self, season: str, players: list, teams: list) -> int:
        self.replace_calls.append(season)
        if self.fail_replace:
            raise StoreUnavailable("snapshot write failed")
        self.players_by_season[season] = list(players)
        self.teams_by_season[season] = list(teams)
        self.versions[season] = self.versions.get(season, 0) + 1
        return self.versions[season]

    async def load_season_snapshot(self, season: str) -> tuple[int, list, list]:
        self.load_calls.append(season)
        version = self.versions.get(season, 0)
        players = list(self.players_by_season.get(season, []))
        teams = list(self.teams_by_season.get(season, []))
        if self.read_gate is not None:
            await self.read_gate.wait()
        return version, players, teams

    async def get_player_names(self, player_ids: list[UUID]) -> dict[UUID, str]:
        return {}


class TestMatchesServiceConsistency(unittest.TestCase):
    def setUp(self) -> None:
        self.players = [uuid4() for _ in range(5)]
        self.matches_repo = FakeMatchesRepository(set(self.players))
        self.ranking_repo = FakeRankingRepository(self.matches_repo)
        self.locks = SeasonLockRegistry()
        self.stale: dict[str, int | None] = {}
        self.ranking_projection: OptimisticStore = OptimisticStore()
        self.match_projection: OptimisticStore = OptimisticStore()
        self.ranking_service = RankingService(
            ranking_repository=cast(RankingRepository, self.ranking_repo),
            projection=self.ranking_projection,
            season_locks=self.locks,
            stale_seasons=self.stale,
        )
        self.service = MatchesService(
            repository=cast(MatchesRepository, self.matches_repo),
            projection=self.match_projection,
            ranking_service=self.ranking_service,
            season_locks=self.locks,
        )

    def _payload(self, score_a: int = 21, score_b: int = 15, **overrides: object) -> MatchCreateRequest:
        p1, p2, p3, p4 = self.players[:4]
        data: dict[str, object] = {
            "team_a": [p1, p2],
            "team_b": [p3, p4],
            "score_a": score_a,
            "score_b": score_b,
            "played_at": datetime(2024, 5, 10, 18, 0),
        }
        data.update(overrides)
        return MatchCreateRequest(**data)

    def test_create_recomputes_season(self) -> None:
        mutation = asyncio.run(self.service.create_match(self._payload()))

        self.assertFalse(mutation.ranking_stale)
        self.assertEqual(mutation.match.season, "2024-05")
        self.assertEqual(mutation.match.winner, TeamSide.A)
        self.assertEqual(self.ranking_repo.replace_calls, ["2024-05"])
        snapshot = self.ranking_projection.get("2024-05")
        self.assertIsNotNone(snapshot)
        self.assertEqual(len(snapshot.players), 4)
        self.assertEqual(len(snapshot.teams), 2)
        self.assertIn(mutation.match.id, self.match_projection)

    def test_repeated_player_is_rejected_without_recompute(self) -> None:
        p1, p2, p3, _ = self.players[:4]
        payload = self._payload(team_a=[p1, p2], team_b=[p3, p1])

        with self.assertRaises(ValueError):
            asyncio.run(self.service.create_match(payload))

        self.assertEqual(self.matches_repo.matches, {})
        self.assertEqual(len(self.match_projection), 0)
        self.assertEqual(self.ranking_repo.replace_calls, [])

    def test_equal_scores_are_rejected_without_recompute(self) -> None:
        with self.assertRaises(ValueError):
            asyncio.run(self.service.create_match(self._payload(score_a=11, score_b=11)))
        self.assertEqual(self.ranking_repo.replace_calls, [])

    def test_unknown_player_is_rejected(self) -> None:
        p1, p2, p3, _ = self.players[:4]
        payload = self._payload(team_b=[p3, uuid4()])
        with self.assertRaises(ValueError):
            asyncio.run(self.service.create_match(payload))
        self.assertEqual(self.matches_repo.matches, {})

    def test_failed_persist_rolls_back_and_skips_recompute(self) -> None:
        self.matches_repo.fail_writes = True

        with self.assertRaises(StoreUnavailable):
            asyncio.run(self.service.create_match(self._payload()))

        self.assertEqual(len(self.match_projection), 0)
        self.assertEqual(self.ranking_repo.replace_calls, [])
        self.assertFalse(self.locks.is_locked("2024-05"))

    def test_failed_score_update_restores_projection(self) -> None:
        created = asyncio.run(self.service.create_match(self._payload()))
        before = self.match_projection.snapshot()
        self.matches_repo.fail_writes = True

        with self.assertRaises(StoreUnavailable):
            asyncio.run(
                self.service.update_score(
                    created.match.id,
                    MatchScoreUpdateRequest(score_a=3, score_b=21),
                )
            )

        self.assertEqual(self.match_projection.snapshot(), before)
        self.assertEqual(self.ranking_repo.replace_calls, ["2024-05"])

    def test_failed_delete_keeps_match(self) -> None:
        created = asyncio.run(self.service.create_match(self._payload()))
        self.matches_repo.fail_writes = True

        with self.assertRaises(StoreUnavailable):
            asyncio.run(self.service.delete_match(created.match.id))

        self.assertIn(created.match.id, self.match_projection)

    def test_recompute_failure_marks_season_stale(self) -> None:
        self.ranking_repo.fail_replace = True

        with self.assertLogs("api.modules.ranking.service", level="WARNING") as captured:
            mutation = asyncio.run(self.service.create_match(self._payload()))

        self.assertTrue(mutation.ranking_stale)
        self.assertIn("2024-05", self.stale)
        self.assertEqual(self.stale["2024-05"], 0)
        self.assertIn(mutation.match.id, self.matches_repo.matches)
        self.assertIsNone(self.ranking_projection.get("2024-05"))
        self.assertIn("ranking_recompute_failed", "\n".join(captured.output))

        self.ranking_repo.fail_replace = False
        asyncio.run(self.ranking_service.recompute_season_locked("2024-05"))
        self.assertNotIn("2024-05", self.stale)
        self.assertIsNotNone(self.ranking_projection.get("2024-05"))

    def test_score_update_flips_winner(self) -> None:
        created = asyncio.run(self.service.create_match(self._payload()))
        updated = asyncio.run(
            self.service.update_score(
                created.match.id,
                MatchScoreUpdateRequest(score_a=10, score_b=21),
            )
        )
        self.assertEqual(updated.match.winner, TeamSide.B)
        self.assertEqual(updated.match.season, "2024-05")
        snapshot = self.ranking_projection.get("2024-05")
        top = {row.player_id for row in snapshot.players if row.rank <= 2}
        self.assertEqual(top, set(self.players[2:4]))

    def test_missing_match_raises_lookup_error(self) -> None:
        with self.assertRaises(LookupError):
            asyncio.run(self.service.delete_match(uuid4()))

    def test_score_update_waiting_on_a_delete_leaves_no_ghost(self) -> None:
        created = asyncio.run(self.service.create_match(self._payload()))
        match_id = created.match.id

        async def _race() -> list[object]:
            return await asyncio.gather(
                self.service.delete_match(match_id),
                self.service.update_score(
                    match_id,
                    MatchScoreUpdateRequest(score_a=1, score_b=21),
                ),
                return_exceptions=True,
            )

        deleted, updated = asyncio.run(_race())

        self.assertIsInstance(deleted, MatchMutation)
        self.assertIsInstance(updated, LookupError)
        self.assertNotIn(match_id, self.matches_repo.matches)
        self.assertNotIn(match_id, self.match_projection)
        self.assertIsNone(asyncio.run(self.service.get_match(match_id)))
        self.assertEqual(len(self.locks), 0)

    def test_concurrent_creates_in_one_season_both_reach_the_ranking(self) -> None:
        p1, p2, p3, _, p5 = self.players

        async def _race() -> list[MatchMutation]:
            return await asyncio.gather(
                self.service.create_match(self._payload()),
                self.service.create_match(
                    self._payload(team_a=[p1, p3], team_b=[p2, p5], score_a=9, score_b=21)
                ),
            )

        first, second = asyncio.run(_race())

        self.assertFalse(first.ranking_stale)
        self.assertFalse(second.ranking_stale)
        self.assertEqual(self.ranking_repo.replace_calls, ["2024-05", "2024-05"])
        snapshot = self.ranking_projection.get("2024-05")
        self.assertEqual(snapshot.version, 2)
        games = {row.player_id: row.total_games for row in snapshot.players}
        self.assertEqual(len(games), 5)
        self.assertEqual(games[p1], 2)
        self.assertEqual(games[p5], 1)

    def test_snapshot_is_loaded_from_store_when_projection_is_empty(self) -> None:
        asyncio.run(self.service.create_match(self._payload()))
        computed = self.ranking_projection.get("2024-05")
        self.ranking_projection.forget("2024-05")

        loaded = asyncio.run(self.ranking_service.get_snapshot("2024-05"))

        self.assertEqual(self.ranking_repo.load_calls, ["2024-05"])
        self.assertEqual(loaded, computed)
        self.assertEqual(loaded.version, 1)
        asyncio.run(self.ranking_service.get_snapshot("2024-05"))
        self.assertEqual(self.ranking_repo.load_calls, ["2024-05"])

    def test_slow_reader_never_overwrites_a_newer_snapshot(self) -> None:
        created = asyncio.run(self.service.create_match(self._payload()))
        self.ranking_projection.forget("2024-05")

        async def _race() -> RankingSnapshot:
            self.ranking_repo.read_gate = asyncio.Event()
            reader = asyncio.create_task(self.ranking_service.get_snapshot("2024-05"))
            while not self.ranking_repo.load_calls:
                await asyncio.sleep(0)
            await self.service.update_score(
                created.match.id,
                MatchScoreUpdateRequest(score_a=1, score_b=21),
            )
            self.ranking_repo.read_gate.set()
            return await reader

        returned = asyncio.run(_race())

        cached = self.ranking_projection.get("2024-05")
        self.assertEqual(cached.version, self.ranking_repo.versions["2024-05"])
        self.assertEqual(returned, cached)
        stored_wins = {
            row.player_id: row.wins for row in self.ranking_repo.players_by_season["2024-05"]
        }
        self.assertEqual({row.player_id: row.wins for row in cached.players}, stored_wins)
        self.assertEqual(stored_wins[self.players[2]], 1)

    def test_recompute_by_another_process_reaches_cached_reader(self) -> None:
        created = asyncio.run(self.service.create_match(self._payload()))
        # This process failed to recompute after snapshot version 1.
        self.stale["2024-05"] = 1
        stored = self.matches_repo.matches[created.match.id]
        stored.score_a, stored.score_b, stored.winner = 1, 21, TeamSide.B
        other_process = RankingService(
            ranking_repository=cast(RankingRepository, self.ranking_repo),
            projection=OptimisticStore(),
            season_locks=SeasonLockRegistry(),
            stale_seasons={},
        )
        asyncio.run(other_process.recompute_season_locked("2024-05"))

        snapshot = asyncio.run(self.ranking_service.get_snapshot("2024-05"))

        self.assertEqual(snapshot.version, 2)
        top = {row.player_id for row in snapshot.players if row.rank <= 2}
        self.assertEqual(top, set(self.players[2:4]))
        self.assertNotIn("2024-05", self.stale)

    def test_stale_mark_without_known_version_survives_reads(self) -> None:
        asyncio.run(self.service.create_match(self._payload()))
        self.ranking_projection.forget("2024-05")
        self.stale["2024-05"] = None

        asyncio.run(self.ranking_service.get_snapshot("2024-05"))

        self.assertIn("2024-05", self.stale)

    def test_draw_teams_requires_known_players(self) -> None:
        team_a, team_b = asyncio.run(self.service.draw_teams(self.players[:4]))
        self.assertEqual(set([*team_a, *team_b]), set(self.players[:4]))
        with self.assertRaises(ValueError):
            asyncio.run(self.service.draw_teams([*self.players[:3], uuid4()]))


if __name__ == "__main__":
    unittest.main()
