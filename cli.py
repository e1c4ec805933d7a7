"""CLI for the wager ledger."""
import logging

import click
from tabulate import tabulate

import config
from analytics.portfolio import Timeframe, equity_frame, recent_activity, summarize_timeframe
from betting.errors import BettingError
from betting.ledger import track_wager
from betting.odds import format_american, payout
from betting.settlement import SettlementProcessor
from database.cache import GameCache
from database.errors import StoreError
from database.models import BetKind, Final, Game, parse_timestamp, utcnow
from database.schema import init_db, reset_db
from database.store import GameStore, WagerStore


def _stores(ctx):
    db_path = ctx.obj['db_path']
    return GameStore(db_path), WagerStore(db_path)


def _processor(ctx) -> SettlementProcessor:
    game_store, wager_store = _stores(ctx)
    return SettlementProcessor(
        game_store,
        wager_store,
        game_cache=GameCache(game_store),
        max_workers=config.SETTLEMENT_WORKERS,
        push_on_spread_tie=config.SPREAD_PUSH_ON_TIE,
    )


def _echo_report(report):
    click.echo(f"\nSETTLEMENT: game {report.game_id} ({report.home_score}-{report.away_score})")
    click.echo("=" * 40)
    click.echo(f"Settled:        {report.settled_count} "
               f"(W: {report.won} L: {report.lost} P: {report.pushed})")
    click.echo(f"Failed:         {report.failed_count}")
    click.echo(f"Already final:  {len(report.skipped)}")

    if report.failures:
        table = [[f.user_id, f.wager_id, f.error, f.message] for f in report.failures]
        click.echo(tabulate(table, headers=['User', 'Wager', 'Error', 'Detail']))
        click.echo("Failed wagers stay pending. Fix the data and run 'games settle' again.")


@click.group()
@click.option('--db', 'db_path', default=None, help='SQLite database file (defaults to WAGER_DB_PATH)')
@click.pass_context
def cli(ctx, db_path):
    """Wager tracking, settlement and portfolio stats"""
    logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)
    ctx.ensure_object(dict)
    ctx.obj['db_path'] = db_path or config.DB_PATH


@cli.command('init')
@click.pass_context
def init_command(ctx):
    """Initialize the database."""
    init_db(ctx.obj['db_path'])
    click.echo("Database initialized.")


@cli.command('reset')
@click.confirmation_option(prompt='Are you sure you want to reset the database?')
@click.pass_context
def reset_command(ctx):
    """Reset the database (deletes all data)."""
    reset_db(ctx.obj['db_path'])
    click.echo("Database reset complete.")


@cli.group('games')
def games_group():
    """Game management commands."""
    pass


@games_group.command('add')
@click.argument('game_id')
@click.option('--home', required=True, help='Home team identifier')
@click.option('--away', required=True, help='Away team identifier')
@click.option('--start', default=None, help='Start time (ISO 8601, default now)')
@click.option('--neutral', is_flag=True, help='Neutral-site game')
@click.pass_context
def games_add(ctx, game_id, home, away, start, neutral):
    """Add a scheduled game."""
    if home.upper() == away.upper():
        raise click.BadParameter("Home and away teams must be different.")
    game_store, _ = _stores(ctx)
    try:
        start_time = parse_timestamp(start) if start else utcnow()
    except ValueError:
        raise click.BadParameter(f"{start!r} is not an ISO 8601 time.", param_hint="'--start'")
    try:
        game_store.add_game(Game(game_id, home, away, start_time, neutral_site=neutral))
    except StoreError as e:
        raise click.ClickException(f"Could not add game: {e}")
    click.echo(f"Game {game_id} created: {away} @ {home}.")


@games_group.command('list')
@click.option('--status', type=click.Choice(['NP', 'IP', 'FINAL'], case_sensitive=False),
              default=None, help='Filter by status')
@click.option('--limit', default=20, help='Number of games to show')
@click.pass_context
def games_list(ctx, status, limit):
    """List games in the database."""
    game_store, _ = _stores(ctx)
    games = game_store.list_games(status=status, limit=limit)

    if not games:
        click.echo("No games found.")
        return

    table = []
    for g in games:
        table.append([
            g.id,
            g.start_time.strftime("%Y-%m-%d %H:%M"),
            g.away_team,
            '@',
            g.home_team,
            'Y' if g.neutral_site else '',
            g.score_text,
        ])

    click.echo(tabulate(table, headers=['ID', 'Time', 'Away', '', 'Home', 'Neutral', 'Score']))


@games_group.command('finalize')
@click.argument('game_id')
@click.argument('home_score', type=int)
@click.argument('away_score', type=int)
@click.pass_context
def games_finalize(ctx, game_id, home_score, away_score):
    """Record a final score and settle every pending wager on the game."""
    processor = _processor(ctx)
    try:
        report = processor.finalize_and_settle(game_id, home_score, away_score)
    except (BettingError, StoreError) as e:
        raise click.ClickException(str(e))
    _echo_report(report)


@games_group.command('settle')
@click.argument('game_id')
@click.pass_context
def games_settle(ctx, game_id):
    """Re-run settlement for a game that is already final."""
    game_store, _ = _stores(ctx)
    game = game_store.get_game(game_id)
    if game is None:
        raise click.ClickException(f"Game {game_id} not found.")
    if not isinstance(game.status, Final):
        raise click.ClickException(f"Game {game_id} is not final; use 'games finalize'.")

    processor = _processor(ctx)
    try:
        report = processor.settle_game(game_id, game.status.home_score, game.status.away_score)
    except (BettingError, StoreError) as e:
        raise click.ClickException(str(e))
    _echo_report(report)


@cli.group('bets')
def bets_group():
    """Wager tracking commands."""
    pass


@bets_group.command('add')
@click.option('--user', default=None, help='User ID')
@click.option('--game', 'game_id', required=True, help='Game ID')
@click.option('--kind', type=click.Choice([k.value for k in BetKind]), required=True)
@click.option('--selection', required=True, help='e.g. "DUKE ML", "UNC +3.5", "Over 145.5"')
@click.option('--odds', type=float, required=True, help='American odds, e.g. -110 or 150')
@click.option('--stake', type=float, required=True, help='Amount wagered')
@click.pass_context
def bets_add(ctx, user, game_id, kind, selection, odds, stake):
    """Track a new wager."""
    game_store, wager_store = _stores(ctx)
    if game_store.get_game(game_id) is None:
        raise click.ClickException(f"Game {game_id} not found.")
    try:
        wager = track_wager(wager_store, user or config.DEFAULT_USER_ID, game_id,
                            kind, selection, odds, stake)
    except (BettingError, StoreError) as e:
        raise click.ClickException(str(e))

    click.echo(f"Tracked {wager.selection} @ {format_american(wager.odds)} | "
               f"Stake: ${wager.stake:.2f} | Payout: ${payout(wager.stake, wager.odds):.2f} "
               f"(id {wager.id})")


def _wager_rows(views):
    table = []
    for v in views:
        w = v.wager
        table.append([
            w.id,
            w.placed_at.strftime("%Y-%m-%d %H:%M"),
            v.matchup,
            w.kind.display_name,
            w.selection,
            format_american(w.odds),
            f"${w.stake:.2f}",
            w.result.value.upper(),
        ])
    return table


WAGER_HEADERS = ['ID', 'Placed', 'Game', 'Type', 'Selection', 'Odds', 'Stake', 'Result']


@bets_group.command('list')
@click.option('--user', default=None, help='User ID')
@click.option('--pending', is_flag=True, help='Only show pending wagers')
@click.pass_context
def bets_list(ctx, user, pending):
    """List a user's wagers."""
    game_store, wager_store = _stores(ctx)
    wagers = wager_store.list_wagers(user or config.DEFAULT_USER_ID)
    activity = recent_activity(wagers, GameCache(game_store), limit=len(wagers))
    views = activity.tracked if pending else activity.recent

    if not views:
        click.echo("No pending bets." if pending else "No bets.")
        return

    click.echo(tabulate(_wager_rows(views), headers=WAGER_HEADERS))


@bets_group.command('recent')
@click.option('--user', default=None, help='User ID')
@click.option('--limit', default=config.RECENT_BETS_LIMIT, help='Number of bets to show')
@click.pass_context
def bets_recent(ctx, user, limit):
    """Show the most recently placed wagers."""
    game_store, wager_store = _stores(ctx)
    wagers = wager_store.list_wagers(user or config.DEFAULT_USER_ID)
    activity = recent_activity(wagers, GameCache(game_store), limit=limit)

    if not activity.recent:
        click.echo("No bet history.")
        return

    click.echo(tabulate(_wager_rows(activity.recent), headers=WAGER_HEADERS))
    click.echo(f"\n{len(activity.tracked)} pending")


@bets_group.command('delete')
@click.argument('wager_id')
@click.option('--user', default=None, help='User ID')
@click.pass_context
def bets_delete(ctx, wager_id, user):
    """Delete a wager."""
    _, wager_store = _stores(ctx)
    if not wager_store.delete_wager(user or config.DEFAULT_USER_ID, wager_id):
        raise click.ClickException(f"Wager {wager_id} not found.")
    click.echo(f"Deleted wager {wager_id}.")


@cli.group('portfolio')
def portfolio_group():
    """Performance commands."""
    pass


def _timeframe_option(f):
    return click.option('--timeframe', default=config.DEFAULT_TIMEFRAME,
                        type=click.Choice([t.value for t in Timeframe], case_sensitive=False),
                        help='Lookback window')(f)


@portfolio_group.command('stats')
@click.option('--user', default=None, help='User ID')
@_timeframe_option
@click.pass_context
def portfolio_stats(ctx, user, timeframe):
    """Show P&L, ROI and record for a lookback window."""
    _, wager_store = _stores(ctx)
    wagers = wager_store.list_wagers(user or config.DEFAULT_USER_ID)
    snapshot = summarize_timeframe(wagers, Timeframe.parse(timeframe))

    click.echo(f"\nBETTING PERFORMANCE ({Timeframe.parse(timeframe).value})")
    click.echo("=" * 40)
    click.echo(f"Settled Bets:   {snapshot.settled}")
    click.echo(f"Wins:           {snapshot.wins}")
    click.echo(f"Losses:         {snapshot.losses}")
    click.echo(f"Pushes:         {snapshot.pushes}")
    click.echo(f"Win Rate:       {snapshot.win_rate:.2%}")
    click.echo("-" * 40)
    click.echo(f"Total Staked:   ${snapshot.total_staked:,.2f}")
    click.echo(f"Total P&L:      ${snapshot.total_pnl:+,.2f}")
    click.echo(f"ROI:            {snapshot.roi:+.2%}")
    click.echo("=" * 40)


@portfolio_group.command('chart')
@click.option('--user', default=None, help='User ID')
@_timeframe_option
@click.option('--export', 'output', default=None, help='Write the equity curve to this CSV file')
@click.pass_context
def portfolio_chart(ctx, user, timeframe, output):
    """Show the cumulative P&L curve."""
    _, wager_store = _stores(ctx)
    wagers = wager_store.list_wagers(user or config.DEFAULT_USER_ID)
    snapshot = summarize_timeframe(wagers, Timeframe.parse(timeframe))
    frame = equity_frame(snapshot)

    if output:
        frame.to_csv(output, index=False)
        click.echo(f"Exported {len(frame)} points to {output}")
        return

    table = [[p.timestamp.strftime("%Y-%m-%d %H:%M"), f"${p.pnl:+,.2f}"] for p in snapshot.equity]
    click.echo(tabulate(table, headers=['Time', 'P&L']))


if __name__ == '__main__':
    cli()
