#!/usr/bin/env python3
"""
CLI for Club Score - seed demo data, simulate matches and print scorecards
"""
import logging
import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from clubscore.config import settings
from clubscore.database import init_db, get_session
from clubscore.models import Match, Tournament, MatchPhase
from clubscore.models.match import TBD
from clubscore.generators import DemoGenerator
from clubscore.engine import ScoringEngine
from clubscore.engine.completion import describe_result
from clubscore.engine.errors import ScoringError
from clubscore.engine.overs import BALLS_PER_OVER

console = Console()


@click.group()
@click.option("--verbose", is_flag=True, help="Log engine activity")
def cli(verbose: bool):
    """Club Score - cricket scoring for club tournaments"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.LOG_LEVEL.upper(),
        format="%(levelname)s [%(name)s] %(message)s",
    )


@cli.command()
def init():
    """Initialize the database"""
    console.print("[yellow]Initializing database...[/yellow]")
    init_db()
    console.print("[green]Database initialized successfully![/green]")


@cli.command()
@click.option("--teams", default="4", type=click.Choice(["2", "4", "8", "16"]), help="Bracket size")
@click.option("--overs", default=5, help="Overs per innings")
@click.option("--players", default=6, help="Players per side")
@click.option("--seed", default=None, type=int, help="Random seed for repeatable data")
def seed_demo(teams: str, overs: int, players: int, seed: int):
    """Create a demo club, members and a knockout tournament"""
    init_db()
    session = get_session()
    try:
        tournament = DemoGenerator(session, seed=seed).generate_tournament(
            bracket_size=int(teams), overs=overs, players_per_side=players
        )
        console.print(f"[green]Created tournament #{tournament.id}: {tournament.name}[/green]")
        _print_bracket(tournament)
    except ScoringError as e:
        console.print(f"[red]{e.message}[/red]")
    finally:
        session.close()


@cli.command()
@click.argument("tournament_id", type=int)
def bracket(tournament_id: int):
    """Show a tournament bracket"""
    session = get_session()
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        console.print(f"[red]Tournament {tournament_id} not found[/red]")
        session.close()
        return
    _print_bracket(tournament)
    session.close()


def _print_bracket(tournament: Tournament):
    table = Table(title=f"{tournament.name} ({tournament.status.value})")
    table.add_column("Match", justify="right")
    table.add_column("Round", justify="right")
    table.add_column("Team A", style="cyan")
    table.add_column("Team B", style="magenta")
    table.add_column("Score")
    table.add_column("Winner", style="green")

    for match in tournament.matches:
        score = f"{match.score_a} - {match.score_b}" if match.completed else match.phase.value
        table.add_row(
            str(match.id),
            str(match.round),
            match.team_a,
            match.team_b,
            score,
            match.winner or "",
        )
    console.print(table)


@cli.command()
@click.argument("match_id", type=int)
def simulate_match(match_id: int):
    """Score a match with random deliveries through the scoring engine"""
    session = get_session()
    engine = ScoringEngine(session)
    try:
        match = engine.get_match(match_id)
        if match.phase != MatchPhase.NOT_STARTED or TBD in (match.team_a, match.team_b):
            console.print("[red]Match must be unstarted with both teams decided[/red]")
            return

        for side in ("A", "B"):
            _simulate_innings(engine, match, side)

        session.refresh(match)
        console.print(Panel(f"[bold green]{describe_result(match)}[/bold green]"))
        for innings in match.innings:
            _print_scorecard(innings)
    except ScoringError as e:
        console.print(f"[red]{e.message}[/red]")
    finally:
        session.close()


def _simulate_innings(engine: ScoringEngine, match: Match, batting_side: str):
    players = match.max_wickets + 1
    batters = DemoGenerator.generate_lineup(players)
    bowlers = DemoGenerator.generate_lineup(min(5, players))

    innings = engine.start_innings(match.id, batting_side, batters[:2], bowling_lineup=bowlers)
    striker, non_striker, next_in = 0, 1, 2
    balls_in_over, over = 0, 0

    while not innings.is_complete:
        delivery = DemoGenerator.random_delivery()
        new_batter = None
        if delivery["is_wicket"] and next_in < len(batters) and innings.total_wickets + 1 < match.max_wickets:
            new_batter = batters[next_in]

        result = engine.record_delivery(
            match.id,
            batsman_name=batters[striker].name,
            bowler_name=bowlers[over % len(bowlers)].name,
            new_batsman_name=new_batter.name if new_batter else None,
            **delivery,
        )
        innings = result.innings

        if delivery["is_wicket"]:
            striker = next_in
            next_in += 1
        elif delivery["runs_scored"] % 2 == 1:
            striker, non_striker = non_striker, striker

        if result.ball_event.is_legal:
            balls_in_over += 1
            if balls_in_over == BALLS_PER_OVER:
                balls_in_over = 0
                over += 1
                striker, non_striker = non_striker, striker


@cli.command()
@click.argument("match_id", type=int)
def scorecard(match_id: int):
    """Print the scorecard of a match"""
    session = get_session()
    match = session.get(Match, match_id)
    if not match:
        console.print(f"[red]Match {match_id} not found[/red]")
        session.close()
        return

    console.print(Panel(f"[bold]{match.team_a} vs {match.team_b}[/bold] ({match.phase.value})"))
    for innings in match.innings:
        _print_scorecard(innings)
    result = describe_result(match)
    if result:
        console.print(f"\n[bold green]{result}[/bold green]")
    session.close()


def _print_scorecard(innings):
    """Print innings scorecard"""
    console.print(
        f"\n[bold]{innings.batting_team_name}: {innings.score_display} ({innings.total_overs} overs)[/bold]"
    )

    # Batting
    bat_table = Table(title="Batting")
    bat_table.add_column("Batter", style="cyan")
    bat_table.add_column("Dismissal")
    bat_table.add_column("R", justify="right")
    bat_table.add_column("B", justify="right")
    bat_table.add_column("4s", justify="right")
    bat_table.add_column("6s", justify="right")
    bat_table.add_column("SR", justify="right")

    for entry in innings.batting_entries:
        dismissal = entry.dismissal_type.value.lower().replace("_", " ") if entry.is_out else "not out"
        bat_table.add_row(
            entry.player_name,
            dismissal,
            str(entry.runs),
            str(entry.balls_faced),
            str(entry.fours),
            str(entry.sixes),
            f"{entry.strike_rate:.1f}",
        )

    console.print(bat_table)

    # Bowling
    bowl_table = Table(title="Bowling")
    bowl_table.add_column("Bowler", style="magenta")
    bowl_table.add_column("O", justify="right")
    bowl_table.add_column("R", justify="right")
    bowl_table.add_column("W", justify="right")
    bowl_table.add_column("Econ", justify="right")

    for entry in innings.bowling_entries:
        bowl_table.add_row(
            entry.player_name,
            str(entry.overs_bowled),
            str(entry.runs_conceded),
            str(entry.wickets),
            f"{entry.economy:.1f}",
        )

    console.print(bowl_table)
    console.print(f"Extras: {innings.extras}")


if __name__ == "__main__":
    cli()
