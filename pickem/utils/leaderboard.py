"""
Leaderboard aggregation: folds weekly score maps into ranked standings.
"""

from pickem.models.leaderboard import LeaderboardRow


def rank_rows(totals, names=None):
    """
    Turn a user_id -> points mapping into ranked rows.

    Rows are ordered by points, highest first. Equal totals keep the order in
    which the users appear in ``totals`` (the sort is stable) and rank is the
    1-based position in that order.
    """
    names = names or {}
    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [
        LeaderboardRow(
            user_id=user_id,
            total_points=points,
            rank=position,
            name=names.get(user_id),
        )
        for position, (user_id, points) in enumerate(ordered, start=1)
    ]


def aggregate(weekly_scores, names=None):
    """
    Sum points per user across weeks and rank the result.

    Args:
        weekly_scores: iterable of user_id -> points mappings, one per week
        names: optional user_id -> display name mapping

    Returns:
        list of LeaderboardRow. A user missing from a week counts as 0 for
        that week; a user seen in any week always gets a row.
    """
    totals = {}
    for week in weekly_scores:
        for user_id, points in week.items():
            totals[user_id] = totals.get(user_id, 0) + int(points or 0)
    return rank_rows(totals, names)


def rows_to_scores(rows):
    """Re-wrap ranked rows as a single week's score map"""
    return {row.user_id: row.total_points for row in rows}


def rows_from_payload(payload):
    """Rank the remote leaderboard payload ([{userId, name, points}])"""
    totals = {}
    names = {}
    for entry in payload or []:
        user_id = str(entry.get("userId", entry.get("id")))
        totals[user_id] = totals.get(user_id, 0) + int(
            entry.get("points", entry.get("totalPoints")) or 0
        )
        if entry.get("name"):
            names[user_id] = entry["name"]
    return rank_rows(totals, names)
