"""
Scoring Engine for the pick'em client

This module scores picks against game results. Scoring is flat: a correct
pick is worth 1 point, anything else 0. The point spread is display-only.
For folding weekly scores into standings, see pickem.utils.leaderboard.
"""

from pickem.models.game import Side


def score_pick(game, side):
    """
    Calculate score for a single pick.

    Returns:
        1 for correct pick (win)
        0 for incorrect pick, or a game without a result yet

    Args:
        game: Game the pick was made on (None for a dangling reference)
        side: Side the user selected
    """
    if game is None or game.result is None:
        return 0

    if Side.parse(side) is game.result.winner:
        return 1

    return 0


def score_week(games, picks):
    """
    Score one week of picks for every user.

    Args:
        games: iterable of Game for the week
        picks: mapping of (user_id, game_id) -> Side

    Returns:
        dict of user_id -> points. Every user with at least one pick appears,
        with 0 when nothing they picked has been won yet. Picks that reference
        an unknown game score nothing.
    """
    games_by_id = {game.id: game for game in games}
    scores = {}

    for (user_id, game_id), side in picks.items():
        scores.setdefault(user_id, 0)
        game = games_by_id.get(str(game_id))
        if game is None:
            continue
        scores[user_id] += score_pick(game, side)

    return scores


def pick_record(games, picks):
    """
    Win/loss tallies for one user's picks

    Args:
        games: iterable of Game
        picks: mapping of game_id -> Side

    Returns:
        dict with wins, losses, pending and win_pct (0-100, one decimal)
    """
    games_by_id = {game.id: game for game in games}
    wins = losses = pending = 0

    for game_id, side in picks.items():
        game = games_by_id.get(str(game_id))
        if game is None:
            continue
        if game.result is None:
            pending += 1
        elif score_pick(game, side):
            wins += 1
        else:
            losses += 1

    decided = wins + losses
    return {
        "wins": wins,
        "losses": losses,
        "pending": pending,
        "win_pct": round(wins * 100.0 / decided, 1) if decided else 0.0,
    }
