from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

# Allow running the script from the repo root.
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))


async def recompute(seasons: list[str], *, all_seasons: bool) -> list[tuple[str, int, int]]:
    from api.db.session import session_scope
    from api.deps.ranking import build_ranking_service
    from api.state import ProjectionState

    projections = ProjectionState()
    results: list[tuple[str, int, int]] = []
    async with session_scope() as session:
        service = build_ranking_service(session, projections)
        targets = list(seasons)
        if all_seasons:
            targets.extend(season for season in await service.list_seasons() if season not in targets)
        if not targets:
            targets.append(service.current_season())
        for season in targets:
            snapshot = await service.recompute_season_locked(season)
            results.append((snapshot.season, len(snapshot.players), len(snapshot.teams)))
    return results


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Rebuild season ranking snapshots from recorded matches.",
    )
    parser.add_argument(
        "--season",
        action="append",
        dest="seasons",
        default=[],
        help="Season key (YYYY-MM). Can be repeated. Defaults to the current season.",
    )
    parser.add_argument(
        "--all",
        action="store_true",
        dest="all_seasons",
        help="Recompute every season that has at least one match.",
    )
    return parser.parse_args()


async def main_async() -> int:
    args = _parse_args()
    from api.config import get_settings
    from api.db.session import dispose_engine
    from api.observability import configure_logging

    configure_logging(get_settings())
    try:
        results = await recompute(args.seasons, all_seasons=args.all_seasons)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    finally:
        await dispose_engine()

    for season, players, teams in results:
        print(f"{season}: players={players} teams={teams}")
    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main_async()))
