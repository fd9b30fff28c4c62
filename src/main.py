# Command-line report: standings, knockout results and the leaderboard

import argparse
import os
import sys
from pickem.bracket import ROUND_ORDER, get_round_name
from pickem.group_scoring import SCORING_SCHEMES
from pickem.leaderboard import build_leaderboard
from pickem.standings import has_results
from pickem.store import load_snapshot


def print_standings(standings, group_names, team_names):
    for group_id, rows in standings.items():
        print(f"\n{group_names.get(group_id, group_id)}")
        if not has_results(rows):
            print("  No finalized matches yet.")
            continue
        print(f"  {'#':>2} {'Team':<24} {'P':>2} {'W':>2} {'D':>2} {'L':>2} {'GF':>3} {'GA':>3} {'GD':>4} {'PTS':>4}")
        for idx, row in enumerate(rows, start=1):
            print(f"  {idx:>2} {team_names.get(row['team'], row['team']):<24} {row['played']:>2} "
                  f"{row['wins']:>2} {row['draws']:>2} {row['losses']:>2} {row['goals_for']:>3} "
                  f"{row['goals_against']:>3} {row['goal_diff']:>+4} {row['points']:>4}")


def print_bracket(bracket, team_names):
    for round_tag in ROUND_ORDER:
        decided = [m for m in bracket['rounds'][round_tag] if m['winner']]
        if not decided:
            continue
        print(f"\n{get_round_name(round_tag)}")
        for match in decided:
            home = team_names.get(match['home_team_id'], match['home_team_id'])
            away = team_names.get(match['away_team_id'], match['away_team_id'])
            print(f"  {match['match_code']}: {home} {match['home_score']}-{match['away_score']} {away}")
    champion = bracket['champion']
    if champion:
        print(f"\nChampion: {team_names.get(champion, champion)}")


def print_leaderboard(rows):
    print("\n--- Leaderboard ---")
    if not rows:
        print("No submitted picks.")
        return
    for row in rows:
        print(f"{row['rank']:>3}. {row['name']:<24} {row['total']:>4} pts "
              f"(groups {row['group_total']}, knockout {row['knockout_total']}, "
              f"perfect groups {row['perfect_groups']})")


def main():
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description="Print standings and the pick'em leaderboard.")
    parser.add_argument('data_dir', nargs='?', default=os.path.join(base_dir, 'data'),
                        help='Directory holding teams.yaml, results.yaml and picks.yaml')
    parser.add_argument('--scheme', choices=sorted(SCORING_SCHEMES),
                        help='Override the group scoring scheme from settings.yaml')
    args = parser.parse_args()

    if not os.path.isdir(args.data_dir):
        print(f"Error: Data directory not found: {args.data_dir}", file=sys.stderr)
        return 1

    snapshot, settings = load_snapshot(args.data_dir)
    if args.scheme:
        settings['scoring_scheme'] = args.scheme

    if not snapshot.groups:
        print(f"No groups loaded. Check {os.path.join(args.data_dir, 'teams.yaml')}")
        return 1

    data = build_leaderboard(snapshot, settings)
    team_names = {team.id: team.name for team in snapshot.teams}
    group_names = {group.id: group.name for group in snapshot.groups}

    print(f"Scoring scheme: {data['scheme']}")
    print_standings(data['standings'], group_names, team_names)
    print_bracket(data['bracket'], team_names)
    print_leaderboard(data['leaderboard'])
    return 0


if __name__ == '__main__':
    sys.exit(main())
