"""
Tests for session/window win rate aggregation.
"""

from datetime import timedelta

import pytest

from ladder_bot.data_models.game import GamesPage
from ladder_bot.data_models.winrate import WinRateOptions
from ladder_bot.services.game_history import GameHistoryService
from ladder_bot.services.winrate import WinRateService, calculate_win_rate

from helpers import NOW, FakeGamesSource, duel, hours_ago, make_game, participant, profile, run

ALICE = profile(1, "Alice")
BOB = profile(2, "Bob")
ALICE_ALT = profile(11, "Alice2")


def _service(histories, **source_kwargs):
    source = FakeGamesSource(histories, **source_kwargs)
    service = WinRateService(GameHistoryService(source.fetch_page), clock=lambda: NOW)
    return service, source


def _team_game(game_id, started_at, result='loss', duration=1500):
    other = 'win' if result == 'loss' else 'loss'
    return make_game(game_id, started_at, [
        [participant(1, result, 'mongols'), participant(3, result)],
        [participant(2, other), participant(4, other)],
    ], duration=duration)


@pytest.mark.parametrize("wins, losses, expected", [
    (7, 3, 70.0),
    (1, 2, 33.3),
    (2, 1, 66.7),
    (1, 15, 6.3),   # 62.5 rounds half up
    (0, 4, 0.0),
    (5, 0, 100),
    (0, 0, 100),
])
def test_calculate_win_rate(wins, losses, expected):
    assert calculate_win_rate(wins, losses) == expected


def test_session_ends_at_idle_gap():
    service, _ = _service({1: [
        duel(1, hours_ago(1), result='win'),
        duel(2, hours_ago(2), result='loss'),
        duel(3, hours_ago(7), result='win'),
    ]})

    stats = run(service.compute_win_rate(ALICE))

    assert stats.games_count == 2
    assert stats.wins_count == 1
    assert stats.losses_count == 1
    assert stats.win_rate == 50.0


def test_session_stops_fetching_after_boundary():
    history = [duel(i, hours_ago(h)) for i, h in enumerate([1, 2, 10, 11, 12, 13], start=1)]
    service, source = _service({1: history}, page_size=2)

    run(service.compute_win_rate(ALICE))

    # The boundary game (10h) is on page 2; page 3 is never requested
    assert source.pages_requested(1) == [1, 2]


def test_custom_idle_gap():
    service, _ = _service({1: [
        duel(1, hours_ago(1)),
        duel(2, hours_ago(2.5)),
        duel(3, hours_ago(4)),
    ]})

    stats = run(service.compute_win_rate(ALICE, options=WinRateOptions(idle_gap_seconds=3600)))

    assert stats.games_count == 1
    assert stats.idle_gap_seconds == 3600


def test_explicit_window_excludes_older_games():
    service, source = _service({1: [
        duel(1, hours_ago(1), result='win'),
        duel(2, hours_ago(30), result='loss'),
    ]}, honor_since=False)

    stats = run(service.compute_win_rate(ALICE, options=WinRateOptions(timespan_seconds=24 * 3600)))

    assert stats.games_count == 1
    assert stats.wins_count == 1
    assert stats.timespan_seconds == 24 * 3600
    assert source.calls[0][2] == NOW - timedelta(hours=24)


def test_explicit_window_ignores_idle_gaps():
    service, _ = _service({1: [
        duel(1, hours_ago(1)),
        duel(2, hours_ago(12)),
        duel(3, hours_ago(23)),
    ]})

    stats = run(service.compute_win_rate(ALICE, options=WinRateOptions(timespan_seconds=24 * 3600)))

    assert stats.games_count == 3


def test_team_games_excluded_by_default():
    service, _ = _service({1: [_team_game(1, hours_ago(1))]})

    stats = run(service.compute_win_rate(ALICE))

    assert stats.games_count == 0
    assert stats.win_rate == 100


def test_team_games_included_on_request():
    service, _ = _service({1: [_team_game(1, hours_ago(1), result='loss')]})

    stats = run(service.compute_win_rate(ALICE, options=WinRateOptions(include_team_games=True)))

    assert stats.games_count == 1
    assert stats.losses_count == 1
    assert stats.win_rate == 0.0


def test_skipped_team_games_still_extend_the_session():
    # Intentional: the idle clock is updated before the team size filter
    service, _ = _service({1: [
        duel(1, hours_ago(1)),
        _team_game(2, hours_ago(4)),
        duel(3, hours_ago(7)),
    ]})

    stats = run(service.compute_win_rate(ALICE))

    assert stats.games_count == 2


def test_recent_ongoing_game_is_pending():
    service, _ = _service({1: [duel(1, hours_ago(1), result=None, duration=None)]})

    stats = run(service.compute_win_rate(ALICE))

    assert stats.pending_games == 1
    assert stats.pending_game_started_at == hours_ago(1)
    assert stats.games_count == 0


def test_old_ongoing_game_is_ignored():
    service, _ = _service({1: [duel(1, hours_ago(5), result=None, duration=None)]})

    stats = run(service.compute_win_rate(ALICE))

    assert stats.pending_games == 0
    assert stats.pending_game_started_at is None
    assert stats.games_count == 0


def test_pending_tracks_most_recent_ongoing_game():
    service, _ = _service({1: [
        duel(1, hours_ago(0.5), result=None, duration=0),
        duel(2, hours_ago(1), result=None, duration=None),
        duel(3, hours_ago(2), result='win'),
    ]})

    stats = run(service.compute_win_rate(ALICE))

    assert stats.pending_games == 2
    assert stats.pending_game_started_at == hours_ago(0.5)
    assert stats.games_count == 1


def test_session_opponent_filter_is_applied_locally():
    service, source = _service({1: [
        duel(1, hours_ago(1), opponent=2, result='win'),
        duel(2, hours_ago(3), opponent=5, result='loss'),
        duel(3, hours_ago(6), opponent=2, result='loss'),
    ]})

    stats = run(service.compute_win_rate(ALICE, BOB))

    # The game against player 5 is not counted but keeps the session going
    assert stats.games_count == 2
    assert stats.wins_count == 1
    assert stats.losses_count == 1
    assert stats.opponent == BOB
    assert all(call[1] is None for call in source.calls)


def test_window_opponent_filter_is_pushed_upstream():
    service, source = _service({1: [
        duel(1, hours_ago(1), opponent=2, result='win'),
        duel(2, hours_ago(3), opponent=5, result='loss'),
    ]})

    stats = run(service.compute_win_rate(ALICE, BOB, WinRateOptions(timespan_seconds=24 * 3600)))

    assert stats.games_count == 1
    assert source.calls[0][1] == 2


def test_opponent_on_same_team_is_not_counted():
    game = make_game(1, hours_ago(1), [
        [participant(1, 'win'), participant(2, 'win')],
        [participant(3, 'loss'), participant(4, 'loss')],
    ])
    service, _ = _service({1: [game]})

    stats = run(service.compute_win_rate(ALICE, BOB, WinRateOptions(include_team_games=True)))

    assert stats.games_count == 0


def test_civilization_and_map_filters():
    service, _ = _service({1: [
        duel(1, hours_ago(1), civ='english', map_name='Dry Arabia', result='win'),
        duel(2, hours_ago(2), civ='french', map_name='Dry Arabia', result='loss'),
        duel(3, hours_ago(3), civ='english', map_name='Altai', result='loss'),
    ]})

    by_civ = run(service.compute_win_rate(ALICE, options=WinRateOptions(civilization='english')))
    by_map = run(service.compute_win_rate(ALICE, options=WinRateOptions(map='Dry Arabia')))
    both = run(service.compute_win_rate(ALICE, options=WinRateOptions(civilization='english', map='Altai')))

    assert (by_civ.games_count, by_civ.wins_count, by_civ.losses_count) == (2, 1, 1)
    assert (by_map.games_count, by_map.wins_count, by_map.losses_count) == (2, 1, 1)
    assert (both.games_count, both.losses_count) == (1, 1)


def test_game_boundaries_and_duration():
    service, _ = _service({1: [
        duel(1, hours_ago(1), duration=1000),
        duel(2, hours_ago(2), duration=1500),
        duel(3, hours_ago(3), duration=2000),
    ]})

    stats = run(service.compute_win_rate(ALICE))

    assert stats.duration == 4500
    assert stats.last_game_at == hours_ago(1) + timedelta(seconds=1000)
    assert stats.first_game_at == hours_ago(3)


def test_alt_accounts_are_merged():
    service, _ = _service({
        1: [duel(1, hours_ago(1), subject=1, result='win')],
        11: [duel(2, hours_ago(2), subject=11, result='loss')],
    })

    stats = run(service.compute_win_rate([ALICE, ALICE_ALT]))

    assert stats.player == ALICE
    assert stats.games_count == 2
    assert stats.win_rate == 50.0


def test_no_games_returns_zero_stats():
    service, _ = _service({})

    stats = run(service.compute_win_rate(ALICE))

    assert stats.games_count == 0
    assert stats.wins_count == 0
    assert stats.losses_count == 0
    assert stats.duration == 0
    assert stats.first_game_at is None
    assert stats.last_game_at is None
    assert stats.win_rate == 100
    assert stats.pending_games == 0


def test_unavailable_profile_returns_zero_stats():
    service, _ = _service({1: [duel(1, hours_ago(1))]}, failing=[1])

    stats = run(service.compute_win_rate(ALICE))

    assert stats.games_count == 0
    assert stats.win_rate == 100


def test_stats_to_dict():
    service, _ = _service({1: [duel(1, hours_ago(1), result='win')]})

    data = run(service.compute_win_rate(ALICE)).to_dict()

    assert data['player'] == {'profile_id': 1, 'name': 'Alice'}
    assert data['games_count'] == 1
    assert data['win_rate'] == 100
    assert data['first_game_at'] == hours_ago(1).isoformat()


def test_page_without_total_count_still_aggregates():
    async def fetch_page(profile_id, opponent_profile_id=None, since=None, page=1):
        return GamesPage.from_dict({
            'games': [{
                'game_id': 5, 'started_at': '2024-06-01T18:00:00Z', 'duration': 900, 'map': 'Altai',
                'teams': [[{'player': {'profile_id': 1, 'result': 'win'}}],
                          [{'player': {'profile_id': 2, 'result': 'loss'}}]],
            }],
            'total_count': None,
        }, page=page)

    service = WinRateService(GameHistoryService(fetch_page), clock=lambda: NOW)

    stats = run(service.compute_win_rate(ALICE))

    assert (stats.games_count, stats.wins_count) == (1, 1)
