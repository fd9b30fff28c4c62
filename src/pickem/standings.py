"""
Group standings computed from finalized group-stage matches.
"""
import logging
import unicodedata
from typing import Dict, List

logger = logging.getLogger(__name__)

POINTS_FOR_WIN = 3
POINTS_FOR_DRAW = 1


def _empty_row(team) -> Dict:
    return {
        'team': team.id,
        'name': team.name,
        'played': 0,
        'wins': 0,
        'draws': 0,
        'losses': 0,
        'goals_for': 0,
        'goals_against': 0,
        'goal_diff': 0,
        'points': 0,
    }


def name_sort_key(name: str):
    """Alphabetical key that ignores case and accents; the raw name breaks exact folds."""
    name = str(name)
    decomposed = unicodedata.normalize('NFKD', name)
    folded = ''.join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return (folded, name)


def standing_sort_key(row: Dict):
    """Points, goal difference, goals for (all desc), then team name."""
    return (-row['points'], -row['goal_diff'], -row['goals_for'], name_sort_key(row['name']))


def calculate_group_standings(teams, matches) -> List[Dict]:
    """
    Calculate the standings table for one group.

    Only matches that are finalized with both scores contribute. A match
    naming a team outside ``teams`` is skipped.

    Returns: [{'team': id, 'name': name, 'played': n, 'wins': n, 'draws': n,
               'losses': n, 'goals_for': n, 'goals_against': n,
               'goal_diff': n, 'points': n}, ...] ordered leader first.
    """
    team_stats = {team.id: _empty_row(team) for team in teams}

    for match in matches:
        if not match.counts:
            continue

        home = team_stats.get(match.home_team_id)
        away = team_stats.get(match.away_team_id)
        if home is None or away is None:
            logger.warning(f"Skipping match {match.id}: team not in group "
                           f"({match.home_team_id} vs {match.away_team_id})")
            continue

        home_score = match.home_score
        away_score = match.away_score

        home['played'] += 1
        away['played'] += 1
        home['goals_for'] += home_score
        home['goals_against'] += away_score
        away['goals_for'] += away_score
        away['goals_against'] += home_score

        if home_score > away_score:
            home['wins'] += 1
            home['points'] += POINTS_FOR_WIN
            away['losses'] += 1
        elif home_score < away_score:
            away['wins'] += 1
            away['points'] += POINTS_FOR_WIN
            home['losses'] += 1
        else:
            home['draws'] += 1
            away['draws'] += 1
            home['points'] += POINTS_FOR_DRAW
            away['points'] += POINTS_FOR_DRAW

    for row in team_stats.values():
        row['goal_diff'] = row['goals_for'] - row['goals_against']

    return sorted(team_stats.values(), key=standing_sort_key)


def calculate_all_standings(groups, teams, matches) -> Dict[str, List[Dict]]:
    """
    Calculate standings for every group.

    Returns: {group_id: [standing rows...]}
    """
    teams_by_group = {}
    for team in teams:
        teams_by_group.setdefault(team.group_id, []).append(team)

    matches_by_group = {}
    for match in matches:
        matches_by_group.setdefault(match.group_id, []).append(match)

    standings = {}
    for group in groups:
        standings[group.id] = calculate_group_standings(
            teams_by_group.get(group.id, []),
            matches_by_group.get(group.id, []),
        )
    return standings


def has_results(rows: List[Dict]) -> bool:
    """False while no finalized match has been folded into the table."""
    return any(row['played'] > 0 for row in rows)
