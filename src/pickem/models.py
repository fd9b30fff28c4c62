"""
Input records for the pick'em engine.

Every record can be built from a plain dict with ``from_dict``; that is the
only place where alternate field names are accepted.
"""
from datetime import datetime, timezone


def _first_present(data, *keys):
    """Return the first value among keys that is present and not None."""
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _required(data, *keys):
    """Like _first_present, but a row without any of the keys is rejected."""
    value = _first_present(data, *keys)
    if value is None:
        raise KeyError(f"missing {' or '.join(keys)}")
    return value


def parse_timestamp(value):
    """Parse a submission timestamp; naive values are taken as UTC."""
    if value is None or value == '':
        return None
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _as_int(value):
    if value is None or value == '':
        return None
    return int(value)


class Team:
    def __init__(self, id, name, group_id=None):
        self.id = id
        self.name = name
        self.group_id = group_id

    @classmethod
    def from_dict(cls, data, group_id=None):
        return cls(
            id=str(data['id']),
            name=data.get('name') or str(data['id']),
            group_id=str(_first_present(data, 'group_id', 'group') or group_id or '') or None,
        )

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name}, group_id={self.group_id})"


class Group:
    def __init__(self, id, name, team_ids=None):
        self.id = id
        self.name = name
        self.team_ids = team_ids if team_ids else []

    def __repr__(self):
        return f"Group(id={self.id}, name={self.name}, team_ids={self.team_ids})"


class GroupMatch:
    def __init__(self, id, group_id, home_team_id, away_team_id,
                 home_score=None, away_score=None, finalized=False):
        self.id = id
        self.group_id = group_id
        self.home_team_id = home_team_id
        self.away_team_id = away_team_id
        self.home_score = home_score
        self.away_score = away_score
        self.finalized = finalized

    @property
    def has_score(self):
        return self.home_score is not None and self.away_score is not None

    @property
    def counts(self):
        """A match feeds standings only once it is finalized with both scores."""
        return bool(self.finalized) and self.has_score

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data['id']),
            group_id=str(_first_present(data, 'group_id', 'group') or '') or None,
            home_team_id=_optional_str(_first_present(data, 'home_team_id', 'home')),
            away_team_id=_optional_str(_first_present(data, 'away_team_id', 'away')),
            home_score=_as_int(data.get('home_score')),
            away_score=_as_int(data.get('away_score')),
            finalized=bool(_first_present(data, 'finalized', 'is_final')),
        )

    def __repr__(self):
        return (f"GroupMatch(id={self.id}, group_id={self.group_id}, "
                f"{self.home_team_id} {self.home_score}-{self.away_score} {self.away_team_id}, "
                f"finalized={self.finalized})")


class KnockoutMatch:
    def __init__(self, id, round, slot, home_team_id=None, away_team_id=None,
                 home_score=None, away_score=None, finalized=False):
        self.id = id
        self.round = round
        self.slot = slot
        self.home_team_id = home_team_id
        self.away_team_id = away_team_id
        self.home_score = home_score
        self.away_score = away_score
        self.finalized = finalized

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data['id']),
            round=str(data['round']).upper(),
            slot=int(_first_present(data, 'slot', 'match_no')),
            home_team_id=_optional_str(_first_present(data, 'home_team_id', 'home')),
            away_team_id=_optional_str(_first_present(data, 'away_team_id', 'away')),
            home_score=_as_int(data.get('home_score')),
            away_score=_as_int(data.get('away_score')),
            finalized=bool(_first_present(data, 'finalized', 'is_final')),
        )

    def __repr__(self):
        return (f"KnockoutMatch(id={self.id}, round={self.round}, slot={self.slot}, "
                f"{self.home_team_id} {self.home_score}-{self.away_score} {self.away_team_id}, "
                f"finalized={self.finalized})")


class GroupPick:
    def __init__(self, participant_id, group_id, position, team_id, submitted_at=None):
        self.participant_id = participant_id
        self.group_id = group_id
        self.position = position
        self.team_id = team_id
        self.submitted_at = submitted_at

    @property
    def is_submitted(self):
        return self.submitted_at is not None

    @classmethod
    def from_dict(cls, data):
        return cls(
            participant_id=str(_required(data, 'participant_id', 'user_id')),
            group_id=str(_required(data, 'group_id', 'group')),
            position=int(_first_present(data, 'position', 'rank')),
            team_id=str(_required(data, 'team_id', 'team')),
            submitted_at=parse_timestamp(data.get('submitted_at')),
        )

    def __repr__(self):
        return (f"GroupPick(participant_id={self.participant_id}, group_id={self.group_id}, "
                f"position={self.position}, team_id={self.team_id}, submitted_at={self.submitted_at})")


class KnockoutPick:
    def __init__(self, participant_id, match_id, team_id, submitted_at=None):
        self.participant_id = participant_id
        self.match_id = match_id
        self.team_id = team_id
        self.submitted_at = submitted_at

    @property
    def is_submitted(self):
        return self.submitted_at is not None

    @classmethod
    def from_dict(cls, data):
        return cls(
            participant_id=str(_required(data, 'participant_id', 'user_id')),
            match_id=str(_required(data, 'match_id')),
            team_id=str(_required(data, 'team_id', 'winner_team_id', 'team')),
            submitted_at=parse_timestamp(data.get('submitted_at')),
        )

    def __repr__(self):
        return (f"KnockoutPick(participant_id={self.participant_id}, match_id={self.match_id}, "
                f"team_id={self.team_id}, submitted_at={self.submitted_at})")


class Participant:
    def __init__(self, id, display_name=None, submitted_at=None):
        self.id = id
        self.display_name = display_name
        self.submitted_at = submitted_at

    @property
    def name(self):
        """Display name, falling back to a short form of the id."""
        if self.display_name and self.display_name.strip():
            return self.display_name.strip()
        return f"User {str(self.id)[:6]}"

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(_required(data, 'id', 'user_id', 'participant_id')),
            display_name=data.get('display_name') or data.get('name'),
            submitted_at=parse_timestamp(data.get('submitted_at')),
        )

    def __repr__(self):
        return f"Participant(id={self.id}, name={self.name}, submitted_at={self.submitted_at})"


def _optional_str(value):
    return None if value is None else str(value)


class Snapshot:
    """Everything the engine reads, already fetched from the result and prediction stores."""

    def __init__(self, groups=None, teams=None, group_matches=None, knockout_matches=None,
                 participants=None, group_picks=None, knockout_picks=None):
        self.groups = groups if groups else []
        self.teams = teams if teams else []
        self.group_matches = group_matches if group_matches else []
        self.knockout_matches = knockout_matches if knockout_matches else []
        self.participants = participants if participants else []
        self.group_picks = group_picks if group_picks else []
        self.knockout_picks = knockout_picks if knockout_picks else []

    def __repr__(self):
        return (f"Snapshot(groups={len(self.groups)}, teams={len(self.teams)}, "
                f"group_matches={len(self.group_matches)}, knockout_matches={len(self.knockout_matches)}, "
                f"participants={len(self.participants)})")
