"""
Scoring of group ranking predictions against live standings.

Two rules have been used for group picks, both are kept as named schemes:

- ``position``: exact hits score 3/2/1/0 for positions 1-4.
- ``exact_qualified``: an exact hit scores 5, a team predicted in the top
  four that finished in the top four at a different position scores 2.

Under either scheme a group where all four positions are exact gets the
perfect-group bonus and counts towards the participant's perfect groups.
"""
from typing import Dict, List

from pickem.standings import has_results

SCORED_POSITIONS = 4

SCORING_SCHEMES = {
    'position': {
        'name': 'position',
        'exact_points': {1: 3, 2: 2, 3: 1, 4: 0},
        'qualified_points': 0,
        'perfect_bonus': 2,
    },
    'exact_qualified': {
        'name': 'exact_qualified',
        'exact_points': {1: 5, 2: 5, 3: 5, 4: 5},
        'qualified_points': 2,
        'perfect_bonus': 2,
    },
}

DEFAULT_SCHEME = 'position'

# Group result statuses
STATUS_SCORED = 'scored'
STATUS_PENDING = 'pending'
STATUS_MISSING = 'missing'


def get_scheme(scheme=None) -> Dict:
    """Resolve a scheme name (or an already resolved scheme dict)."""
    if scheme is None:
        return SCORING_SCHEMES[DEFAULT_SCHEME]
    if isinstance(scheme, dict):
        return scheme
    if scheme not in SCORING_SCHEMES:
        raise ValueError(f"Unknown scoring scheme: {scheme}")
    return SCORING_SCHEMES[scheme]


def score_group(picked: Dict[int, str], rows: List[Dict], scheme=None) -> Dict:
    """
    Score one participant's ranking of one group.

    Args:
        picked: {position: team_id} for the submitted ranking
        rows: current standing rows for the group, leader first
        scheme: scheme name or dict from SCORING_SCHEMES

    Returns dict with:
    - status: 'scored', 'pending' (no finalized match yet) or 'missing' (no picks)
    - points: base points plus bonus
    - bonus: perfect-group bonus awarded
    - perfect: True when every scored position is exact
    - correct: number of exact positions
    - picks: per-position detail (picked_position, team, actual_position,
      points_awarded, exact, qualified_wrong_order)
    """
    scheme = get_scheme(scheme)
    positions = list(range(1, min(SCORED_POSITIONS, len(rows)) + 1))
    actual_top = [row['team'] for row in rows[:len(positions)]]
    actual_position = {row['team']: idx + 1 for idx, row in enumerate(rows)}

    result = {
        'status': STATUS_SCORED,
        'points': 0,
        'bonus': 0,
        'perfect': False,
        'correct': 0,
        'picks': [],
    }

    if not picked:
        result['status'] = STATUS_MISSING
        return result

    scoring = has_results(rows)
    if not scoring:
        result['status'] = STATUS_PENDING

    for position in positions:
        team_id = picked.get(position)
        detail = {
            'picked_position': position,
            'team': team_id,
            'actual_position': actual_position.get(team_id) if scoring else None,
            'points_awarded': 0,
            'exact': False,
            'qualified_wrong_order': False,
        }
        if scoring and team_id is not None:
            if actual_top[position - 1] == team_id:
                detail['exact'] = True
                detail['points_awarded'] = scheme['exact_points'].get(position, 0)
                result['correct'] += 1
            elif team_id in actual_top:
                detail['qualified_wrong_order'] = True
                detail['points_awarded'] = scheme['qualified_points']
        result['points'] += detail['points_awarded']
        result['picks'].append(detail)

    if scoring and positions and result['correct'] == len(positions):
        result['perfect'] = True
        result['bonus'] = scheme['perfect_bonus']
        result['points'] += result['bonus']

    return result


def picks_by_group(picks) -> Dict[str, Dict[int, str]]:
    """Index submitted picks as {group_id: {position: team_id}}; drafts are dropped."""
    indexed = {}
    for pick in picks:
        if not pick.is_submitted:
            continue
        indexed.setdefault(pick.group_id, {})[pick.position] = pick.team_id
    return indexed


def score_group_picks(picks, standings: Dict[str, List[Dict]], scheme=None) -> Dict:
    """
    Score all of one participant's group picks.

    Args:
        picks: the participant's GroupPick records (drafts are ignored)
        standings: {group_id: standing rows} from calculate_all_standings
        scheme: scheme name or dict

    Returns: {'per_group': {group_id: score_group result},
              'perfect_groups': n, 'total': n}
    """
    scheme = get_scheme(scheme)
    indexed = picks_by_group(picks)

    per_group = {}
    total = 0
    perfect_groups = 0
    for group_id, rows in standings.items():
        group_result = score_group(indexed.get(group_id, {}), rows, scheme)
        per_group[group_id] = group_result
        total += group_result['points']
        if group_result['perfect']:
            perfect_groups += 1

    return {
        'per_group': per_group,
        'perfect_groups': perfect_groups,
        'total': total,
    }

