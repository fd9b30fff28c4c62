"""
Leaderboard: combines group and knockout scores per participant and ranks them.

Ranking order is total points (desc), perfect groups (desc), earliest
submission (participants without a timestamp last), display name, then
participant id.
"""
from typing import Dict, List, Optional

from pickem.bracket import build_bracket
from pickem.group_scoring import get_scheme, score_group_picks
from pickem.knockout_scoring import score_knockout_picks
from pickem.models import Participant, parse_timestamp
from pickem.standings import calculate_all_standings, name_sort_key


def earliest_submission(*pick_lists):
    """Earliest submission timestamp among submitted picks, or None."""
    stamps = [parse_timestamp(pick.submitted_at) for picks in pick_lists for pick in picks if pick.is_submitted]
    return min(stamps) if stamps else None


def leaderboard_sort_key(row: Dict):
    submitted_at = parse_timestamp(row.get('submitted_at'))
    submitted_key = (0, submitted_at) if submitted_at is not None else (1,)
    return (
        -row['total'],
        -row['perfect_groups'],
        submitted_key,
        name_sort_key(row['name']),
        row['participant_id'],
    )


def rank_leaderboard(participant_totals: List[Dict]) -> List[Dict]:
    """
    Order participant rows and number them.

    Each row needs participant_id, name, total, perfect_groups and
    submitted_at. Returns new dicts with a 1-based 'rank' added.
    """
    ordered = sorted(participant_totals, key=leaderboard_sort_key)
    ranked = []
    for position, row in enumerate(ordered, start=1):
        ranked_row = dict(row)
        ranked_row['rank'] = position
        ranked.append(ranked_row)
    return ranked


def score_participant(participant, group_picks, knockout_picks, standings, bracket,
                      scheme=None, round_points=None) -> Dict:
    """Score one participant's submitted picks and return their leaderboard row."""
    group_result = score_group_picks(group_picks, standings, scheme)
    knockout_result = score_knockout_picks(knockout_picks, bracket, round_points)

    submitted_at = participant.submitted_at or earliest_submission(group_picks, knockout_picks)

    return {
        'participant_id': participant.id,
        'name': participant.name,
        'group_total': group_result['total'],
        'knockout_total': knockout_result['total'],
        'total': group_result['total'] + knockout_result['total'],
        'perfect_groups': group_result['perfect_groups'],
        'submitted_at': submitted_at,
        'breakdown': {group_id: result['points'] for group_id, result in group_result['per_group'].items()},
        'knockout_correct': knockout_result['correct'],
        'knockout_pending': knockout_result['pending'],
        'group_detail': group_result['per_group'],
        'knockout_detail': knockout_result['per_match'],
    }


def _picks_by_participant(picks) -> Dict[str, list]:
    indexed = {}
    for pick in picks:
        if pick.is_submitted:
            indexed.setdefault(pick.participant_id, []).append(pick)
    return indexed


def build_participant_scores(snapshot, standings: Dict, bracket: Dict,
                             scheme=None, round_points=None) -> List[Dict]:
    """
    Score every participant with at least one submitted pick.

    Participants with only drafts do not appear. Picks from a participant
    missing in the participant list are scored under a fallback name.
    """
    group_picks = _picks_by_participant(snapshot.group_picks)
    knockout_picks = _picks_by_participant(snapshot.knockout_picks)

    participants = {participant.id: participant for participant in snapshot.participants}
    for participant_id in list(group_picks) + list(knockout_picks):
        if participant_id not in participants:
            participants[participant_id] = Participant(participant_id)

    rows = []
    for participant_id, participant in participants.items():
        own_group_picks = group_picks.get(participant_id, [])
        own_knockout_picks = knockout_picks.get(participant_id, [])
        if not own_group_picks and not own_knockout_picks:
            continue
        rows.append(score_participant(participant, own_group_picks, own_knockout_picks,
                                      standings, bracket, scheme, round_points))
    return rows


def build_leaderboard(snapshot, settings: Optional[Dict] = None) -> Dict:
    """
    Run the whole engine over a snapshot.

    Returns: {'standings': {group_id: rows}, 'bracket': bracket dict,
              'leaderboard': ranked rows, 'scheme': scheme name}
    """
    settings = settings or {}
    scheme = get_scheme(settings.get('scoring_scheme'))

    standings = calculate_all_standings(snapshot.groups, snapshot.teams, snapshot.group_matches)
    bracket = build_bracket(snapshot.knockout_matches)
    rows = build_participant_scores(snapshot, standings, bracket, scheme,
                                    settings.get('knockout_points'))

    return {
        'standings': standings,
        'bracket': bracket,
        'leaderboard': rank_leaderboard(rows),
        'scheme': scheme['name'],
    }
