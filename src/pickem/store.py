"""
Loading of a pick'em snapshot from a data directory of YAML files.

Files (all optional):
- teams.yaml: groups with their teams
- results.yaml: group_matches and knockout_matches
- picks.yaml: participants, group_picks and knockout_picks
- settings.yaml: scoring_scheme, knockout_points, picks_deadline, auto_advance

Reads of all files happen under one FileLock so a snapshot is never a mix
of two writes by the admin tooling.
"""
import logging
import os
from datetime import datetime, timezone

import yaml
from filelock import FileLock

from pickem.group_scoring import DEFAULT_SCHEME, SCORING_SCHEMES
from pickem.models import (GroupMatch, Group, GroupPick, KnockoutMatch, KnockoutPick,
                           Participant, Snapshot, Team, parse_timestamp)

logger = logging.getLogger(__name__)

TEAMS_FILE = 'teams.yaml'
RESULTS_FILE = 'results.yaml'
PICKS_FILE = 'picks.yaml'
SETTINGS_FILE = 'settings.yaml'
LOCK_FILE = '.lock'
LOCK_TIMEOUT = 10

DEFAULT_SETTINGS = {
    'scoring_scheme': DEFAULT_SCHEME,
    'knockout_points': {},
    'picks_deadline': None,
    'auto_advance': False,
}


def _read_yaml(data_dir, filename) -> dict:
    """Read a YAML mapping; a missing, empty or unparsable file reads as {}."""
    path = os.path.join(data_dir, filename)
    if not os.path.exists(path):
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.warning(f'Failed to parse {path}: {e}')
            return {}
    if not isinstance(data, dict):
        return {}
    return data


def _build_records(factory, rows, label):
    """Build records from dict rows, skipping rows that cannot be read."""
    records = []
    for row in rows or []:
        try:
            records.append(factory(row))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f'Skipping malformed {label} {row!r}: {e}')
    return records


def parse_groups(data):
    """Parse teams.yaml content into (groups, teams)."""
    groups = []
    teams = []
    for group_data in data.get('groups') or []:
        if not isinstance(group_data, dict) or group_data.get('id') is None:
            logger.warning(f'Skipping malformed group {group_data!r}')
            continue
        group_id = str(group_data['id'])
        group_teams = _build_records(lambda row: Team.from_dict(row, group_id=group_id),
                                     group_data.get('teams'), 'team')
        groups.append(Group(group_id, group_data.get('name') or group_id,
                            [team.id for team in group_teams]))
        teams.extend(group_teams)
    return groups, teams


def load_groups(data_dir):
    return parse_groups(_read_yaml(data_dir, TEAMS_FILE))


def load_results(data_dir):
    """Load (group_matches, knockout_matches)."""
    data = _read_yaml(data_dir, RESULTS_FILE)
    group_matches = _build_records(GroupMatch.from_dict, data.get('group_matches'), 'group match')
    knockout_matches = _build_records(KnockoutMatch.from_dict, data.get('knockout_matches'), 'knockout match')
    return group_matches, knockout_matches


def load_picks(data_dir):
    """Load (participants, group_picks, knockout_picks)."""
    data = _read_yaml(data_dir, PICKS_FILE)
    participants = _build_records(Participant.from_dict, data.get('participants'), 'participant')
    group_picks = _build_records(GroupPick.from_dict, data.get('group_picks'), 'group pick')
    knockout_picks = _build_records(KnockoutPick.from_dict, data.get('knockout_picks'), 'knockout pick')
    return participants, group_picks, knockout_picks


def load_settings(data_dir) -> dict:
    """Load settings.yaml merged over the defaults."""
    settings = dict(DEFAULT_SETTINGS)
    settings.update(_read_yaml(data_dir, SETTINGS_FILE))

    if not isinstance(settings['scoring_scheme'], str) or settings['scoring_scheme'] not in SCORING_SCHEMES:
        logger.warning(f"Unknown scoring scheme {settings['scoring_scheme']!r}, "
                       f"using {DEFAULT_SCHEME!r}")
        settings['scoring_scheme'] = DEFAULT_SCHEME

    try:
        settings['picks_deadline'] = parse_timestamp(settings['picks_deadline'])
    except (TypeError, ValueError) as e:
        logger.warning(f'Ignoring picks_deadline: {e}')
        settings['picks_deadline'] = None

    settings['knockout_points'] = _parse_knockout_points(settings.get('knockout_points'))
    return settings


def _parse_knockout_points(raw) -> dict:
    """Normalize {round_tag: points}; entries that are not whole numbers are dropped."""
    if not raw:
        return {}
    if not isinstance(raw, dict):
        logger.warning(f'Ignoring knockout_points: expected a mapping, got {raw!r}')
        return {}
    points_table = {}
    for round_tag, points in raw.items():
        try:
            points_table[str(round_tag).upper()] = int(points)
        except (TypeError, ValueError) as e:
            logger.warning(f'Ignoring knockout_points entry {round_tag!r}: {e}')
    return points_table


def picks_locked(settings, now=None) -> bool:
    """True once the picks deadline has passed; False when no deadline is set."""
    deadline = settings.get('picks_deadline')
    if deadline is None:
        return False
    now = now or datetime.now(timezone.utc)
    return now >= deadline


def load_snapshot(data_dir):
    """
    Load the snapshot and settings from a data directory.

    Returns: (Snapshot, settings dict)
    """
    os.makedirs(data_dir, exist_ok=True)
    with FileLock(os.path.join(data_dir, LOCK_FILE), timeout=LOCK_TIMEOUT):
        groups, teams = load_groups(data_dir)
        group_matches, knockout_matches = load_results(data_dir)
        participants, group_picks, knockout_picks = load_picks(data_dir)
        settings = load_settings(data_dir)

    snapshot = Snapshot(
        groups=groups,
        teams=teams,
        group_matches=group_matches,
        knockout_matches=knockout_matches,
        participants=participants,
        group_picks=group_picks,
        knockout_picks=knockout_picks,
    )
    logger.info(f'Loaded {snapshot!r} from {data_dir}')
    return snapshot, settings
