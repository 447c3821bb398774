#!/usr/bin/env python3
"""
Pick'em Management CLI

This script provides command-line access to the remote pick'em API for
operators: the week's games, lock time, leaderboard and tournament brackets.
"""

import click
from flask import current_app
from flask.cli import with_appcontext

from pickem import create_app
from pickem.errors import PickemError
from pickem.services import get_api
from pickem.services.tournament_service import champion, tournament_state
from pickem.utils.leaderboard import rows_from_payload
from pickem.utils.timezone_utils import format_lock_time, parse_timestamp


@click.group()
def cli():
    """Pick'em Management CLI"""
    pass


@cli.command()
@click.option("--week", type=int, help="Week number (current week when omitted)")
@with_appcontext
def games(week):
    """Show the games for a week"""
    try:
        resolved_week, week_games = get_api().fetch_games(week)
    except PickemError as e:
        click.echo(f"❌ Error fetching games: {e.message}")
        return

    if not week_games:
        click.echo(f"No games found for week {resolved_week}.")
        return

    click.echo(f"Week {resolved_week} games:")
    for game in week_games:
        line = (
            f"  {game.id}: {game.away_team.abbreviation} @ {game.home_team.abbreviation}"
            f" [{game.status.value}]"
        )
        if game.spread is not None:
            line += f" spread {game.spread:+g}"
        if game.result is not None:
            line += f" - {game.result.away_score}-{game.result.home_score}, {game.result.winner.value} wins"
        click.echo(line)


@cli.command("lock-time")
@with_appcontext
def lock_time():
    """Show the current week and when picks lock"""
    try:
        data = get_api().fetch_lock_time()
    except PickemError as e:
        click.echo(f"❌ Error fetching lock time: {e.message}")
        return

    locks_at = parse_timestamp(data.get("lockTime"))
    click.echo(f"📅 Week {data.get('week')}: picks lock {format_lock_time(locks_at)}")


@cli.command()
@click.option("--limit", type=int, default=10, show_default=True, help="Rows to show")
@with_appcontext
def leaderboard(limit):
    """Show the global leaderboard"""
    try:
        rows = rows_from_payload(get_api().fetch_leaderboard())
    except PickemError as e:
        click.echo(f"❌ Error fetching leaderboard: {e.message}")
        return

    if not rows:
        click.echo("Leaderboard is empty.")
        return

    click.echo("Leaderboard:")
    for row in rows[:limit]:
        click.echo(f"  {row.rank:>3}. {row.name or row.user_id} - {row.total_points} pts")


@cli.command()
@click.argument("league_id")
@click.option("--token", envvar="PICKEM_TOKEN", required=True, help="Bearer token")
@with_appcontext
def matchups(league_id, token):
    """Show a league's tournament bracket"""
    try:
        bracket = get_api().fetch_matchups(league_id, token)
    except PickemError as e:
        click.echo(f"❌ Error fetching matchups: {e.message}")
        return

    state = tournament_state(bracket)
    click.echo(f"🏆 League {league_id}: tournament {state.value}")
    for m in sorted(bracket, key=lambda m: (m.round, m.week)):
        winner = m.winner_id or "-"
        click.echo(
            f"  R{m.round} W{m.week}: {m.user1_name or m.user1_id} vs "
            f"{m.user2_name or m.user2_id} (winner {winner})"
        )
    winner = champion(bracket)
    if winner:
        click.echo(f"Champion: {winner}")


@cli.command()
@with_appcontext
def status():
    """Show application and remote API status"""
    click.echo("🏈 Pick'em Status")
    click.echo(f"🔗 Remote API: {current_app.config.get('PICKEM_API_BASE_URL')}")
    click.echo(f"🗄️  Cache: {current_app.config.get('CACHE_TYPE')}")

    try:
        data = get_api().fetch_lock_time()
    except PickemError as e:
        click.echo(f"❌ Remote API unreachable: {e.message}")
        return

    click.echo(f"✅ Remote API reachable, current week {data.get('week')}")


def main():
    app = create_app()
    with app.app_context():
        cli()


if __name__ == "__main__":
    main()
