"""
Scoring of knockout winner picks against the computed bracket.
"""
from typing import Dict, Optional

from pickem.bracket import ROUND_ORDER

# Points per correct pick by round. Flat by default.
ROUND_POINTS = {round_tag: 1 for round_tag in ROUND_ORDER}

# Pick statuses
CORRECT = 'correct'
INCORRECT = 'incorrect'
PENDING = 'pending'


def score_knockout_picks(picks, bracket: Dict, round_points: Optional[Dict[str, int]] = None) -> Dict:
    """
    Score one participant's knockout picks.

    A pick on a match without a winner yet is 'pending': it carries no
    points and is not counted as incorrect. Drafts and picks on matches that
    are not in the bracket are ignored.

    Returns dict with:
    - per_match: {match_id: {'round', 'match_code', 'picked', 'actual',
      'status', 'points'}}
    - correct / incorrect / pending: counts
    - total: points from correct picks
    """
    points_table = dict(ROUND_POINTS)
    if round_points:
        points_table.update(round_points)

    slots_by_id = {}
    for round_tag in ROUND_ORDER:
        for slot_data in bracket['rounds'][round_tag]:
            if not slot_data['is_placeholder']:
                slots_by_id[slot_data['id']] = slot_data

    per_match = {}
    counts = {CORRECT: 0, INCORRECT: 0, PENDING: 0}
    total = 0

    for pick in picks:
        if not pick.is_submitted:
            continue
        slot_data = slots_by_id.get(pick.match_id)
        if slot_data is None:
            continue

        actual = slot_data['winner']
        if actual is None:
            status = PENDING
            points = 0
        elif pick.team_id == actual:
            status = CORRECT
            points = points_table.get(slot_data['round'], 1)
        else:
            status = INCORRECT
            points = 0

        per_match[pick.match_id] = {
            'round': slot_data['round'],
            'match_code': slot_data['match_code'],
            'picked': pick.team_id,
            'actual': actual,
            'status': status,
            'points': points,
        }
        counts[status] += 1
        total += points

    return {
        'per_match': per_match,
        'correct': counts[CORRECT],
        'incorrect': counts[INCORRECT],
        'pending': counts[PENDING],
        'total': total,
    }
