"""Pretty-print pool output."""

from tabulate import tabulate

from engine.service import ParticipantDetail, RegistrationResult
from engine.standings import PeriodWinner, Standing, Upset
from models.team import Team


def print_teams(teams: list[Team]):
    """Print the roster grouped by region, in seed order."""
    rows = [[t.id, t.region, t.seed, t.name, "out" if t.eliminated else ""] for t in teams]
    print(tabulate(rows, headers=["ID", "Region", "Seed", "Team", "Status"], tablefmt="simple"))


def print_registration(result: RegistrationResult):
    participant = result.participant
    print("\n" + "=" * 60)
    if result.already_registered:
        print(f"  {participant.name} is already registered. Here are your teams:")
    else:
        print(f"  Welcome, {participant.name}! Here is your team pack:")
    print("=" * 60)

    for team in result.bundle:
        print(f"    {team}  - {team.region}")

    if result.degraded:
        print("\n  NOTE: no bundle satisfied every constraint; this pack may repeat")
        print("  another participant's or have three teams from one region.")


def print_leaderboard(standings: list[Standing], period: int | None = None):
    if period is None:
        print("\n=== OVERALL LEADERBOARD ===\n")
        rows = [[s.rank, s.name, s.cumulative_points] for s in standings]
        headers = ["Rank", "Name", "Total"]
    else:
        print(f"\n=== PERIOD {period} LEADERBOARD ===\n")
        rows = [[s.rank, s.name, s.points, s.cumulative_points] for s in standings]
        headers = ["Rank", "Name", "Period", "Running total"]

    if not rows:
        print("  No participants yet.")
        return
    print(tabulate(rows, headers=headers, tablefmt="simple"))


def print_period_winners(winners: list[PeriodWinner], period: int):
    print(f"\n=== PERIOD {period} WINNERS ===\n")
    rows = [[w.place, w.standing.name, w.standing.points, f"${w.payout}"] for w in winners]
    print(tabulate(rows, headers=["Place", "Name", "Points", "Payout"], tablefmt="simple"))


def print_upsets(upsets: list[Upset]):
    print("\n=== CINDERELLA WATCH ===\n")
    if not upsets:
        print("  No upsets yet.")
        return
    rows = [[u.game.round, str(u.winner), str(u.loser), u.seed_gap] for u in upsets]
    print(tabulate(rows, headers=["Round", "Winner", "Loser", "Seed gap"], tablefmt="simple"))


def print_participant(detail: ParticipantDetail):
    p = detail.participant
    print(f"\n{p.name} <{p.email}>  (joined {p.created_at:%Y-%m-%d})\n")

    team_rows = [
        [str(team), team.region, "bonus" if is_bonus else "primary",
         "out" if team.eliminated else "alive"]
        for team, is_bonus in detail.teams
    ]
    print(tabulate(team_rows, headers=["Team", "Region", "Type", "Status"], tablefmt="simple"))

    print()
    score_rows = [[s.period, s.points, s.cumulative_points] for s in detail.scores]
    print(tabulate(score_rows, headers=["Period", "Points", "Running total"], tablefmt="simple"))
