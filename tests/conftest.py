"""
Shared pytest fixtures for the pick'em engine tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os
import yaml
from datetime import datetime, timezone

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from pickem.models import (Team, Group, GroupMatch, KnockoutMatch, GroupPick, KnockoutPick,
                           Participant, Snapshot)

SUBMITTED = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_group_match(match_id, home, away, home_score, away_score, finalized=True, group_id='A'):
    return GroupMatch(match_id, group_id, home, away, home_score, away_score, finalized)


def make_knockout_match(round_tag, slot, home=None, away=None, home_score=None, away_score=None,
                        finalized=False, match_id=None):
    return KnockoutMatch(match_id or f"ko-{round_tag}-{slot}", round_tag, slot,
                         home, away, home_score, away_score, finalized)


def make_group_picks(participant_id, group_id, team_ids, submitted_at=SUBMITTED):
    return [
        GroupPick(participant_id, group_id, position, team_id, submitted_at)
        for position, team_id in enumerate(team_ids, start=1)
    ]


@pytest.fixture
def group_a_teams():
    """Four teams in group A, named so alphabetical order is T1..T4."""
    return [
        Team('t4', 'T4', 'A'),
        Team('t2', 'T2', 'A'),
        Team('t1', 'T1', 'A'),
        Team('t3', 'T3', 'A'),
    ]


@pytest.fixture
def group_a_matches():
    """T1 3-0 T2 and T3 1-1 T4, both finalized."""
    return [
        make_group_match('m1', 't1', 't2', 3, 0),
        make_group_match('m2', 't3', 't4', 1, 1),
    ]


@pytest.fixture
def group_b_teams():
    return [
        Team('b1', 'Brazil', 'B'),
        Team('b2', 'Cameroon', 'B'),
        Team('b3', 'Serbia', 'B'),
        Team('b4', 'Switzerland', 'B'),
    ]


@pytest.fixture
def two_group_snapshot(group_a_teams, group_a_matches, group_b_teams):
    """Two groups, results in group A only, three participants."""
    groups = [
        Group('A', 'Group A', [t.id for t in group_a_teams]),
        Group('B', 'Group B', [t.id for t in group_b_teams]),
    ]
    knockout_matches = [
        make_knockout_match('R32', 1, 't1', 'b2', 2, 1, finalized=True),
        make_knockout_match('R32', 2, 'b1', 't3', 0, 0, finalized=False),
    ]
    participants = [
        Participant('alice', 'Alice', SUBMITTED),
        Participant('bob', 'Bob', datetime(2026, 3, 9, 8, 0, tzinfo=timezone.utc)),
        Participant('carol', 'Carol'),
    ]
    group_picks = (
        make_group_picks('alice', 'A', ['t1', 't3', 't4', 't2'])
        + make_group_picks('alice', 'B', ['b1', 'b3', 'b4', 'b2'])
        + make_group_picks('bob', 'A', ['t2', 't1', 't3', 't4'],
                           submitted_at=datetime(2026, 3, 9, 8, 0, tzinfo=timezone.utc))
        + make_group_picks('carol', 'A', ['t1', 't3', 't4', 't2'], submitted_at=None)
    )
    knockout_picks = [
        KnockoutPick('alice', 'ko-R32-1', 't1', SUBMITTED),
        KnockoutPick('alice', 'ko-R32-2', 'b1', SUBMITTED),
        KnockoutPick('bob', 'ko-R32-1', 'b2', SUBMITTED),
    ]
    return Snapshot(
        groups=groups,
        teams=group_a_teams + group_b_teams,
        group_matches=group_a_matches,
        knockout_matches=knockout_matches,
        participants=participants,
        group_picks=group_picks,
        knockout_picks=knockout_picks,
    )


@pytest.fixture
def data_dir(tmp_path):
    """Data directory with teams, results, picks and settings YAML files."""
    (tmp_path / 'teams.yaml').write_text(yaml.dump({
        'groups': [
            {'id': 'A', 'name': 'Group A', 'teams': [
                {'id': 't1', 'name': 'T1'},
                {'id': 't2', 'name': 'T2'},
                {'id': 't3', 'name': 'T3'},
                {'id': 't4', 'name': 'T4'},
            ]},
            {'id': 'B', 'name': 'Group B', 'teams': [
                {'id': 'b1', 'name': 'Brazil'},
                {'id': 'b2', 'name': 'Cameroon'},
                {'id': 'b3', 'name': 'Serbia'},
                {'id': 'b4', 'name': 'Switzerland'},
            ]},
        ]
    }, default_flow_style=False))

    (tmp_path / 'results.yaml').write_text(yaml.dump({
        'group_matches': [
            {'id': 'm1', 'group_id': 'A', 'home_team_id': 't1', 'away_team_id': 't2',
             'home_score': 3, 'away_score': 0, 'is_final': True},
            {'id': 'm2', 'group_id': 'A', 'home_team_id': 't3', 'away_team_id': 't4',
             'home_score': 1, 'away_score': 1, 'is_final': True},
            {'id': 'm3', 'group_id': 'B', 'home_team_id': 'b1', 'away_team_id': 'b2',
             'home_score': 2, 'away_score': None, 'is_final': False},
        ],
        'knockout_matches': [
            {'id': 'k1', 'round': 'R32', 'match_no': 1, 'home_team_id': 't1', 'away_team_id': 'b2',
             'home_score': 2, 'away_score': 1, 'is_final': True},
            {'id': 'k2', 'round': 'R32', 'match_no': 2, 'home_team_id': 'b1', 'away_team_id': 't3',
             'home_score': None, 'away_score': None, 'is_final': False},
        ],
    }, default_flow_style=False))

    (tmp_path / 'picks.yaml').write_text(yaml.dump({
        'participants': [
            {'user_id': 'alice-0001', 'display_name': 'Alice', 'submitted_at': '2026-03-10T12:00:00Z'},
            {'user_id': 'bob-0002', 'display_name': '  '},
            {'user_id': 'dave-0004', 'display_name': 'Dave'},
        ],
        'group_picks': [
            {'user_id': 'alice-0001', 'group_id': 'A', 'rank': 1, 'team_id': 't1', 'submitted_at': '2026-03-10T12:00:00Z'},
            {'user_id': 'alice-0001', 'group_id': 'A', 'rank': 2, 'team_id': 't3', 'submitted_at': '2026-03-10T12:00:00Z'},
            {'user_id': 'alice-0001', 'group_id': 'A', 'rank': 3, 'team_id': 't4', 'submitted_at': '2026-03-10T12:00:00Z'},
            {'user_id': 'alice-0001', 'group_id': 'A', 'rank': 4, 'team_id': 't2', 'submitted_at': '2026-03-10T12:00:00Z'},
            {'user_id': 'bob-0002', 'group_id': 'A', 'position': 1, 'team_id': 't2', 'submitted_at': '2026-03-09T08:00:00Z'},
            {'user_id': 'bob-0002', 'group_id': 'A', 'position': 2, 'team_id': 't1', 'submitted_at': '2026-03-09T08:00:00Z'},
            {'user_id': 'bob-0002', 'group_id': 'A', 'position': 3, 'team_id': 't3', 'submitted_at': '2026-03-09T08:00:00Z'},
            {'user_id': 'bob-0002', 'group_id': 'A', 'position': 4, 'team_id': 't4', 'submitted_at': '2026-03-09T08:00:00Z'},
            {'user_id': 'dave-0004', 'group_id': 'A', 'position': 1, 'team_id': 't1', 'submitted_at': None},
        ],
        'knockout_picks': [
            {'user_id': 'alice-0001', 'match_id': 'k1', 'team_id': 't1', 'submitted_at': '2026-03-10T12:00:00Z'},
            {'user_id': 'alice-0001', 'match_id': 'k2', 'team_id': 'b1', 'submitted_at': '2026-03-10T12:00:00Z'},
            {'user_id': 'bob-0002', 'match_id': 'k1', 'team_id': 'b2', 'submitted_at': '2026-03-09T08:00:00Z'},
        ],
    }, default_flow_style=False))

    (tmp_path / 'settings.yaml').write_text(yaml.dump({
        'scoring_scheme': 'position',
        'picks_deadline': '2026-03-11T05:00:00Z',
    }, default_flow_style=False))

    return str(tmp_path)


@pytest.fixture
def client(data_dir, monkeypatch):
    """Create a test client reading from the temporary data directory."""
    import app as app_module
    monkeypatch.setattr(app_module, 'DATA_DIR', data_dir)
    app_module.app.config['TESTING'] = True
    with app_module.app.test_client() as client:
        yield client
