"""
Knockout bracket model for a 32-team single elimination draw.

The bracket is a flat structure: ``rounds[round_tag]`` is a dense list of
slots, index ``slot - 1``. Round-to-round advancement is a pure function of
(round, slot), so no slot holds a reference to another.
"""
import copy
import logging
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

ROUND_ORDER = ['R32', 'R16', 'QF', 'SF', 'F']

ROUND_MATCH_COUNTS = {'R32': 16, 'R16': 8, 'QF': 4, 'SF': 2, 'F': 1}

ROUND_LABELS = {
    'R32': 'Round of 32',
    'R16': 'Round of 16',
    'QF': 'Quarterfinals',
    'SF': 'Semifinals',
    'F': 'Final',
}

# The round of 32 is drawn as two columns of eight feeding the round of 16.
FIRST_ROUND_HALF = 8


def get_round_name(round_tag: str) -> str:
    """Get the display label for a round tag."""
    return ROUND_LABELS.get(round_tag, round_tag)


def round_index(round_tag: str) -> int:
    return ROUND_ORDER.index(round_tag)


def get_match_code(round_tag: str, slot: int) -> str:
    return f"{round_tag}-M{slot}"


def _validate_slot(round_tag: str, slot: int):
    if round_tag not in ROUND_MATCH_COUNTS:
        raise ValueError(f"Unknown round: {round_tag}")
    if not 1 <= slot <= ROUND_MATCH_COUNTS[round_tag]:
        raise ValueError(f"Slot {slot} out of range for {round_tag}")


def _ceil_half(n: int) -> int:
    return (n + 1) // 2


def next_slot(round_tag: str, slot: int) -> Optional[Tuple[str, int]]:
    """
    Return the (round, slot) the winner of this slot advances to.

    Round of 32 slots 1-8 feed round of 16 slots 1-4 and slots 9-16 feed
    slots 5-8. Every later round maps slot n to ceil(n/2). The final has no
    next slot and returns None.
    """
    _validate_slot(round_tag, slot)
    idx = round_index(round_tag)
    if idx == len(ROUND_ORDER) - 1:
        return None

    if round_tag == 'R32':
        if slot <= FIRST_ROUND_HALF:
            destination = _ceil_half(slot)
        else:
            destination = FIRST_ROUND_HALF // 2 + _ceil_half(slot - FIRST_ROUND_HALF)
    else:
        destination = _ceil_half(slot)

    return ROUND_ORDER[idx + 1], destination


def feeder_slots(round_tag: str, slot: int) -> List[Tuple[str, int]]:
    """Return the previous-round slots whose winners meet in this slot, in slot order."""
    _validate_slot(round_tag, slot)
    idx = round_index(round_tag)
    if idx == 0:
        return []
    prev_round = ROUND_ORDER[idx - 1]
    return [
        (prev_round, prev_slot)
        for prev_slot in range(1, ROUND_MATCH_COUNTS[prev_round] + 1)
        if next_slot(prev_round, prev_slot) == (round_tag, slot)
    ]


def bracket_side(round_tag: str, slot: int) -> Optional[str]:
    """Which half of the round of 32 a slot is drawn in; None for later rounds."""
    if round_tag != 'R32':
        return None
    return 'left' if slot <= FIRST_ROUND_HALF else 'right'


def _field(match, name):
    if isinstance(match, dict):
        return match.get(name)
    return getattr(match, name, None)


def match_winner(match) -> Optional[str]:
    """
    Winning team id of a knockout match, or None while undetermined.

    A winner exists only for a finalized match with both scores present and
    different. A finalized draw is invalid in knockout play and yields None.
    """
    if match is None or not _field(match, 'finalized'):
        return None
    home_score = _field(match, 'home_score')
    away_score = _field(match, 'away_score')
    if home_score is None or away_score is None:
        return None
    if home_score == away_score:
        return None
    if home_score > away_score:
        return _field(match, 'home_team_id')
    return _field(match, 'away_team_id')


def match_loser(match) -> Optional[str]:
    winner = match_winner(match)
    if winner is None:
        return None
    home = _field(match, 'home_team_id')
    return _field(match, 'away_team_id') if winner == home else home


def check_knockout_result(match) -> List[str]:
    """
    List the problems that would block finalizing a knockout match.

    An empty list means the match can be finalized as it stands.
    """
    problems = []
    if not _field(match, 'home_team_id') or not _field(match, 'away_team_id'):
        problems.append('Set both teams before finalizing.')
    home_score = _field(match, 'home_score')
    away_score = _field(match, 'away_score')
    if home_score is None or away_score is None:
        problems.append('Enter both scores before finalizing.')
    elif home_score == away_score:
        problems.append('Knockout games cannot end in a draw.')
    return problems


def _slot_data(round_tag: str, slot: int, match=None) -> Dict:
    """Build the slot dict for a backing match, or a placeholder when match is None."""
    next_ref = next_slot(round_tag, slot)
    data = {
        'id': f"missing-{round_tag}-{slot}",
        'round': round_tag,
        'round_name': get_round_name(round_tag),
        'slot': slot,
        'match_code': get_match_code(round_tag, slot),
        'side': bracket_side(round_tag, slot),
        'feeds_into': get_match_code(*next_ref) if next_ref else None,
        'home_team_id': None,
        'away_team_id': None,
        'home_score': None,
        'away_score': None,
        'finalized': False,
        'is_placeholder': True,
        'winner': None,
        'loser': None,
    }
    if match is not None:
        data.update({
            'id': match.id,
            'home_team_id': match.home_team_id,
            'away_team_id': match.away_team_id,
            'home_score': match.home_score,
            'away_score': match.away_score,
            'finalized': bool(match.finalized),
            'is_placeholder': False,
        })
        data['winner'] = match_winner(data)
        data['loser'] = match_loser(data)
    return data


def build_round_map(knockout_matches) -> Dict[str, Dict[int, object]]:
    """
    Index knockout matches as {round_tag: {slot: match}}.

    Rows with an unknown round or a slot outside the round are skipped, and
    for a repeated (round, slot) the first row wins.
    """
    round_map = {round_tag: {} for round_tag in ROUND_ORDER}
    for match in knockout_matches:
        if match.round not in round_map:
            logger.warning(f"Skipping knockout match {match.id}: unknown round {match.round}")
            continue
        if not 1 <= match.slot <= ROUND_MATCH_COUNTS[match.round]:
            logger.warning(f"Skipping knockout match {match.id}: slot {match.slot} out of range for {match.round}")
            continue
        if match.slot in round_map[match.round]:
            existing = round_map[match.round][match.slot]
            logger.warning(f"Skipping knockout match {match.id}: "
                           f"{get_match_code(match.round, match.slot)} already filled by {existing.id}")
            continue
        round_map[match.round][match.slot] = match
    return round_map


def build_bracket(knockout_matches) -> Dict:
    """
    Build the dense bracket from a sparse set of knockout matches.

    Returns dict with:
    - rounds: {round_tag: [slot dicts]} with every slot present
    - champion: winner of the final, or None
    - total_matches: number of slots backed by a match
    - finalized_matches: number of slots with a winner
    """
    round_map = build_round_map(knockout_matches)

    rounds = {}
    total_matches = 0
    finalized_matches = 0
    for round_tag in ROUND_ORDER:
        slots = []
        for slot in range(1, ROUND_MATCH_COUNTS[round_tag] + 1):
            match = round_map[round_tag].get(slot)
            if match is not None:
                total_matches += 1
                if match.finalized and check_knockout_result(match):
                    problems = "; ".join(check_knockout_result(match))
                    logger.warning(f"Knockout match {match.id} is finalized but invalid: {problems}")
            slot_data = _slot_data(round_tag, slot, match)
            if slot_data['winner']:
                finalized_matches += 1
            slots.append(slot_data)
        rounds[round_tag] = slots

    return {
        'rounds': rounds,
        'champion': rounds['F'][0]['winner'],
        'total_matches': total_matches,
        'finalized_matches': finalized_matches,
    }


def get_slot(bracket: Dict, round_tag: str, slot: int) -> Dict:
    _validate_slot(round_tag, slot)
    return bracket['rounds'][round_tag][slot - 1]


def get_champion(bracket: Dict) -> Optional[str]:
    """Tournament champion: the final's winner, None until the final is decided."""
    return get_slot(bracket, 'F', 1)['winner']


def winners_by_match_id(bracket: Dict) -> Dict[str, Optional[str]]:
    """{match_id: winner or None} for every slot backed by a real match."""
    winners = {}
    for round_tag in ROUND_ORDER:
        for slot_data in bracket['rounds'][round_tag]:
            if not slot_data['is_placeholder']:
                winners[slot_data['id']] = slot_data['winner']
    return winners


def project_feed(bracket: Dict) -> Dict[str, List[Dict]]:
    """
    Show which decided winners are heading into each later-round slot.

    Returns {round_tag: [{'match_code', 'feeders': [code, code],
    'projected': [team or None, team or None], 'assigned': [home, away]}]}
    for every round after the first.
    """
    feed = {}
    for round_tag in ROUND_ORDER[1:]:
        entries = []
        for slot_data in bracket['rounds'][round_tag]:
            feeders = feeder_slots(round_tag, slot_data['slot'])
            entries.append({
                'match_code': slot_data['match_code'],
                'feeders': [get_match_code(*ref) for ref in feeders],
                'projected': [get_slot(bracket, *ref)['winner'] for ref in feeders],
                'assigned': [slot_data['home_team_id'], slot_data['away_team_id']],
            })
        feed[round_tag] = entries
    return feed


def advance_winners(bracket: Dict) -> Dict:
    """
    Return a copy of the bracket with empty team slots filled from feeder winners.

    The lower feeder slot supplies the home team. Teams already assigned are
    never overwritten, and results are not invented: a filled slot stays
    unfinalized until its own match is decided.
    """
    advanced = copy.deepcopy(bracket)
    for round_tag in ROUND_ORDER[1:]:
        for slot_data in advanced['rounds'][round_tag]:
            home_ref, away_ref = feeder_slots(round_tag, slot_data['slot'])
            if slot_data['home_team_id'] is None:
                slot_data['home_team_id'] = get_slot(advanced, *home_ref)['winner']
            if slot_data['away_team_id'] is None:
                slot_data['away_team_id'] = get_slot(advanced, *away_ref)['winner']
    return advanced
