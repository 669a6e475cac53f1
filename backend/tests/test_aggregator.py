from housecup.services.competition.aggregator import (
    ScoreAggregator,
    aggregate,
    player_standings_for_category,
    rank_houses,
)
from housecup.services.competition.domain import (
    Event,
    EventResult,
    EventStatus,
    EventType,
    House,
    Player,
)

SCORING = {1: 5, 2: 3, 3: 1}

HOUSES = [
    House(id='h1', name='Red Dragons', color_hex='#FF0000'),
    House(id='h2', name='Blue Eagles', color_hex='#0000FF'),
    House(id='h3', name='Green Lions', color_hex='#00FF00'),
]

PLAYERS = [
    Player(id='p1', full_name='Alice Johnson', category_id='kids', house_id='h1'),
    Player(id='p2', full_name='Bob Smith', category_id='kids', house_id='h2'),
    Player(id='p3', full_name='Carol Davis', category_id='elders', house_id='h2'),
]


def _event(event_id, results, event_type=EventType.INDIVIDUAL, category_id='kids',
           status=EventStatus.COMPLETED, scoring=None):
    return Event(
        id=event_id,
        name=event_id,
        category_id=category_id,
        type=event_type,
        status=status,
        scoring=scoring or SCORING,
        results=[EventResult(p, pid) for p, pid in results] if results is not None else None,
    )


def _by_id(scores, attr):
    return {getattr(s, attr): s for s in scores}


def test_individual_winner_credits_player_and_house():
    standings = aggregate(HOUSES, PLAYERS, [_event('e1', [(1, 'p1')])])
    players = _by_id(standings.player_scores, 'player_id')
    houses = _by_id(standings.house_scores, 'house_id')
    assert players['p1'].total_score == 5
    assert players['p1'].events_won == 1
    assert houses['h1'].total_score == 5
    assert houses['h1'].events_won == 1
    assert houses['h1'].category_breakdown == {'kids': 5}


def test_group_event_credits_houses_only():
    event = _event('e1', [(1, 'h1'), (3, 'h2')], event_type=EventType.GROUP)
    standings = aggregate(HOUSES, PLAYERS, [event])
    houses = _by_id(standings.house_scores, 'house_id')
    assert houses['h1'].total_score == 5
    assert houses['h1'].events_won == 1
    assert houses['h2'].total_score == 1
    assert houses['h2'].events_won == 0
    assert houses['h2'].category_breakdown == {'kids': 1}
    assert all(p.total_score == 0 for p in standings.player_scores)


def test_only_completed_events_with_results_count():
    events = [
        _event('scheduled', None, status=EventStatus.SCHEDULED),
        _event('running', None, status=EventStatus.IN_PROGRESS),
        _event('empty', []),
        _event('done', [(2, 'p2')]),
    ]
    standings = aggregate(HOUSES, PLAYERS, events)
    players = _by_id(standings.player_scores, 'player_id')
    assert players['p2'].total_score == 3
    assert players['p2'].events_won == 0
    assert sum(h.total_score for h in standings.house_scores) == 3


def test_unclaimed_and_unscored_placements_contribute_nothing():
    # placement 5 is outside the mapping and defaults to 0 points
    event = _event('e1', [(1, 'p1'), (5, 'p2')])
    standings = aggregate(HOUSES, PLAYERS, [event])
    players = _by_id(standings.player_scores, 'player_id')
    assert players['p2'].total_score == 0


def test_category_breakdown_spans_categories():
    events = [
        _event('e1', [(1, 'p1')], category_id='kids'),
        _event('e2', [(2, 'h1')], event_type=EventType.GROUP, category_id='elders'),
    ]
    standings = aggregate(HOUSES, PLAYERS, events)
    h1 = _by_id(standings.house_scores, 'house_id')['h1']
    assert h1.total_score == 8
    assert h1.category_breakdown == {'kids': 5, 'elders': 3}


def test_orphan_player_is_excluded_but_does_not_stop_aggregation():
    players = PLAYERS + [Player(id='p9', full_name='Orphan', category_id='kids', house_id='gone')]
    event = _event('e1', [(1, 'p9'), (2, 'p1')])
    standings = aggregate(HOUSES, players, [event])
    players_by_id = _by_id(standings.player_scores, 'player_id')
    assert 'p9' not in players_by_id
    assert players_by_id['p1'].total_score == 3
    assert _by_id(standings.house_scores, 'house_id')['h1'].total_score == 3


def test_dangling_participants_are_skipped():
    events = [
        _event('e1', [(1, 'nobody')]),
        _event('e2', [(1, 'no-house')], event_type=EventType.GROUP),
    ]
    standings = aggregate(HOUSES, PLAYERS, events)
    assert all(h.total_score == 0 for h in standings.house_scores)
    assert all(p.total_score == 0 for p in standings.player_scores)


def test_sorted_by_total_with_stable_ties():
    events = [
        _event('e1', [(1, 'h3')], event_type=EventType.GROUP),
    ]
    standings = aggregate(HOUSES, PLAYERS, events)
    assert [s.house_id for s in standings.house_scores] == ['h3', 'h1', 'h2']
    assert [s.player_id for s in standings.player_scores] == ['p1', 'p2', 'p3']


def test_aggregation_uses_current_scoring():
    results = [(1, 'p1')]
    before = aggregate(HOUSES, PLAYERS, [_event('e1', results)])
    after = aggregate(HOUSES, PLAYERS, [_event('e1', results, scoring={1: 10})])
    assert _by_id(before.player_scores, 'player_id')['p1'].total_score == 5
    assert _by_id(after.player_scores, 'player_id')['p1'].total_score == 10


def test_aggregation_is_repeatable():
    events = [
        _event('e1', [(1, 'p1'), (2, 'p2')]),
        _event('e2', [(1, 'h2')], event_type=EventType.GROUP),
    ]
    assert aggregate(HOUSES, PLAYERS, events) == aggregate(HOUSES, PLAYERS, events)


def test_category_filter_selects_players_not_events():
    events = [
        _event('kids-race', [(1, 'p2'), (2, 'p1')], category_id='kids'),
        # p1 also scores in an elders event; it still counts in the kids view
        _event('elders-walk', [(1, 'p1')], category_id='elders'),
    ]
    scores = player_standings_for_category('kids', HOUSES, PLAYERS, events)
    assert [s.player_id for s in scores] == ['p1', 'p2']
    assert scores[0].total_score == 8
    assert scores[0].events_won == 1


def test_category_filter_breaks_ties_by_name():
    players = [
        Player(id='z', full_name='Zed', category_id='kids', house_id='h1'),
        Player(id='a', full_name='amy', category_id='kids', house_id='h2'),
        Player(id='m', full_name='Max', category_id='kids', house_id='h3'),
    ]
    scores = player_standings_for_category('kids', HOUSES, players, [_event('e1', [(1, 'm')])])
    assert [s.player_id for s in scores] == ['m', 'a', 'z']


def test_global_player_order_keeps_ties_in_input_order():
    players = [
        Player(id='z', full_name='Zed', category_id='kids', house_id='h1'),
        Player(id='a', full_name='Amy', category_id='kids', house_id='h2'),
    ]
    standings = aggregate(HOUSES, players, [])
    assert [s.player_id for s in standings.player_scores] == ['z', 'a']


def test_rank_houses_by_category():
    events = [
        _event('e1', [(1, 'h2'), (2, 'h1')], event_type=EventType.GROUP, category_id='kids'),
        _event('e2', [(1, 'h1')], event_type=EventType.GROUP, category_id='elders'),
    ]
    standings = aggregate(HOUSES, PLAYERS, events)
    assert [s.house_id for s in rank_houses(standings, HOUSES)] == ['h1', 'h2', 'h3']
    # kids: h2=5, h1=3, h3=0
    assert [s.house_id for s in rank_houses(standings, HOUSES, 'kids')] == ['h2', 'h1', 'h3']
    # elders: h1=5, then h2 and h3 tie on 0 and fall back to name order
    assert [s.house_id for s in rank_houses(standings, HOUSES, 'elders')] == ['h1', 'h2', 'h3']


def test_score_aggregator_reads_repositories(house_repo, player_repo, event_repo, lifecycle):
    house_repo.create({'id': 'h1', 'name': 'Red Dragons', 'color_hex': '#FF0000'})
    player_repo.create({'id': 'p1', 'full_name': 'Alice Johnson', 'category_id': 'kids', 'house_id': 'h1'})
    event = lifecycle.create({'name': 'Sack Race', 'category_id': 'kids', 'type': 'individual', 'scoring': SCORING})
    lifecycle.start(event.id)
    lifecycle.complete(event.id, [{'placement': 1, 'participant_id': 'p1'}])

    aggregator = ScoreAggregator(house_repo, player_repo, event_repo)
    standings = aggregator.standings()
    assert standings.house_scores[0].total_score == 5
    assert aggregator.player_standings('kids')[0].events_won == 1
    assert aggregator.house_standings('kids')[0].category_breakdown == {'kids': 5}

    lifecycle.reset(event.id)
    assert aggregator.standings().house_scores[0].total_score == 0
