"""
Flask web application for the tournament pick'em.

Read-only JSON views over the scoring engine. Every request reloads the
data directory and recomputes from scratch.
"""
import os
import logging
from datetime import datetime
from flask import Flask, jsonify, request
from pickem.bracket import ROUND_ORDER, ROUND_LABELS, advance_winners, check_knockout_result, project_feed
from pickem.leaderboard import build_leaderboard
from pickem.standings import has_results
from pickem.store import load_snapshot, picks_locked

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('PICKEM_DATA_DIR', os.path.join(BASE_DIR, 'data'))

# Per-participant detail is only served by the participant view
LEADERBOARD_DETAIL_KEYS = ('group_detail', 'knockout_detail')

logging.basicConfig(
    level=os.environ.get('PICKEM_LOG_LEVEL', 'INFO'),
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
)


def _convert_to_serializable(obj):
    """Convert tuples to lists and datetimes to ISO strings recursively for JSON output."""
    if isinstance(obj, dict):
        return {k: _convert_to_serializable(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_convert_to_serializable(item) for item in obj]
    elif isinstance(obj, datetime):
        return obj.isoformat()
    else:
        return obj


def _get_live_data() -> dict:
    """Load the current snapshot and run the engine over it.

    Returns:
        Dictionary with keys: snapshot, settings, standings, bracket,
        leaderboard, scheme, team_names, group_names.
    """
    snapshot, settings = load_snapshot(DATA_DIR)
    data = build_leaderboard(snapshot, settings)
    if settings.get('auto_advance'):
        data['bracket'] = advance_winners(data['bracket'])
    data['snapshot'] = snapshot
    data['settings'] = settings
    data['team_names'] = {team.id: team.name for team in snapshot.teams}
    data['group_names'] = {group.id: group.name for group in snapshot.groups}
    return data


def _standings_entry(data, group_id):
    rows = data['standings'][group_id]
    return {
        'group_id': group_id,
        'name': data['group_names'].get(group_id, group_id),
        'has_results': has_results(rows),
        'rows': rows,
    }


@app.route('/api/summary')
def api_summary():
    """Tournament overview: counts, scoring scheme, deadline and champion."""
    data = _get_live_data()
    snapshot = data['snapshot']
    settings = data['settings']
    champion = data['bracket']['champion']
    return jsonify(_convert_to_serializable({
        'groups': len(snapshot.groups),
        'teams': len(snapshot.teams),
        'group_matches_final': sum(1 for m in snapshot.group_matches if m.counts),
        'knockout_matches_final': data['bracket']['finalized_matches'],
        'participants': len(data['leaderboard']),
        'scoring_scheme': data['scheme'],
        'picks_deadline': settings.get('picks_deadline'),
        'picks_locked': picks_locked(settings),
        'champion': champion,
        'champion_name': data['team_names'].get(champion) if champion else None,
    }))


@app.route('/api/standings')
def api_standings():
    """Standings for every group."""
    data = _get_live_data()
    return jsonify({
        group_id: _standings_entry(data, group_id)
        for group_id in data['standings']
    })


@app.route('/api/standings/<group_id>')
def api_group_standings(group_id):
    """Standings for a single group."""
    data = _get_live_data()
    if group_id not in data['standings']:
        return jsonify({'error': 'Group not found.'}), 404
    return jsonify(_standings_entry(data, group_id))


@app.route('/api/bracket')
def api_bracket():
    """The dense knockout bracket with computed winners."""
    data = _get_live_data()
    bracket = data['bracket']
    return jsonify(_convert_to_serializable({
        'round_order': ROUND_ORDER,
        'round_labels': ROUND_LABELS,
        'rounds': bracket['rounds'],
        'champion': bracket['champion'],
        'total_matches': bracket['total_matches'],
        'finalized_matches': bracket['finalized_matches'],
        'team_names': data['team_names'],
    }))


@app.route('/api/bracket/feed')
def api_bracket_feed():
    """Which decided winners feed each later-round slot."""
    data = _get_live_data()
    return jsonify(_convert_to_serializable(project_feed(data['bracket'])))


@app.route('/api/knockout/check', methods=['POST'])
def api_check_knockout_result():
    """Report whether a knockout result could be finalized as entered."""
    payload = request.get_json(silent=True) or {}
    problems = check_knockout_result({
        'home_team_id': payload.get('home_team_id'),
        'away_team_id': payload.get('away_team_id'),
        'home_score': payload.get('home_score'),
        'away_score': payload.get('away_score'),
    })
    return jsonify({'valid': not problems, 'problems': problems})


@app.route('/api/leaderboard')
def api_leaderboard():
    """Ranked participants with their group and knockout totals."""
    data = _get_live_data()
    rows = [
        {k: v for k, v in row.items() if k not in LEADERBOARD_DETAIL_KEYS}
        for row in data['leaderboard']
    ]
    return jsonify(_convert_to_serializable({
        'scoring_scheme': data['scheme'],
        'rows': rows,
    }))


@app.route('/api/participants/<participant_id>')
def api_participant(participant_id):
    """One participant's leaderboard row with per-group and per-match detail."""
    data = _get_live_data()
    row = next((r for r in data['leaderboard'] if r['participant_id'] == participant_id), None)
    if row is None:
        app.logger.info(f'No submitted picks for participant {participant_id}')
        return jsonify({'error': 'Participant not found.'}), 404
    return jsonify(_convert_to_serializable({
        'scoring_scheme': data['scheme'],
        'participant': row,
        'team_names': data['team_names'],
        'group_names': data['group_names'],
    }))


if __name__ == '__main__':
    app.run(debug=True)
