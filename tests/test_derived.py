"""Tests for values derived from session state: rounds, ranking, names, units."""

from app.schemas.game_session import GameState, Turn, Unit
from app.services.session import (
    UNKNOWN_PLAYER_NAME,
    all_round_numbers,
    events_for_round,
    game_duration_ms,
    get_all_units,
    get_winner,
    player_name,
    round_numbers_from_turns,
    round_score,
    sort_players_by_score,
)

from .conftest import (
    PLAYER_1_ID,
    PLAYER_2_ID,
    PLAYER_3_ID,
    PLAYER_4_ID,
    create_event,
    create_player,
)


class TestAllRoundNumbers:
    def test_merges_events_and_round_scores(self):
        state = GameState(
            players={PLAYER_1_ID: create_player(PLAYER_1_ID, "Aldric", round_scores={"3": 2})},
            game_events=[create_event("e1", round_number=2)],
        )

        assert all_round_numbers(state) == [2, 3]

    def test_sorted_and_deduplicated(self):
        state = GameState(
            players={
                PLAYER_1_ID: create_player(PLAYER_1_ID, "Aldric", round_scores={"4": 1, "1": 1}),
                PLAYER_2_ID: create_player(PLAYER_2_ID, "Brenna", round_scores={"1": 2}),
            },
            game_events=[create_event("e1", round_number=4), create_event("e2")],
        )

        assert all_round_numbers(state) == [1, 4]

    def test_non_numeric_keys_are_ignored(self):
        state = GameState(
            players={PLAYER_1_ID: create_player(PLAYER_1_ID, "Aldric", round_scores={"bonus": 1})}
        )

        assert all_round_numbers(state) == []

    def test_round_keys_use_leading_digits(self):
        state = GameState(
            players={
                PLAYER_1_ID: create_player(
                    PLAYER_1_ID, "Aldric", round_scores={"1_0": 1, " 3": 1, "5th": 1}
                ),
                PLAYER_2_ID: create_player(PLAYER_2_ID, "Brenna", round_scores={"\u0664": 1}),
            }
        )

        assert all_round_numbers(state) == [1, 3, 5]

    def test_empty_state(self, initial_state: GameState):
        assert all_round_numbers(initial_state) == []

    def test_round_numbers_from_turns(self):
        turns = [Turn(number=1, round_number=2), Turn(number=2), Turn(number=3, round_number=1)]

        assert round_numbers_from_turns(turns) == [1, 2]


class TestRanking:
    def test_sort_is_stable_for_ties(self):
        players = [
            create_player(PLAYER_1_ID, "A", score=10),
            create_player(PLAYER_2_ID, "B", score=20),
            create_player(PLAYER_3_ID, "C", score=20),
            create_player(PLAYER_4_ID, "D", score=5),
        ]

        ranking = sort_players_by_score(players)

        assert [p.id for p in ranking] == [PLAYER_2_ID, PLAYER_3_ID, PLAYER_1_ID, PLAYER_4_ID]

    def test_missing_score_counts_as_zero(self):
        players = [create_player(PLAYER_1_ID, "A"), create_player(PLAYER_2_ID, "B", score=1)]

        assert [p.id for p in sort_players_by_score(players)] == [PLAYER_2_ID, PLAYER_1_ID]

    def test_input_is_not_reordered(self):
        players = [create_player(PLAYER_1_ID, "A", score=1), create_player(PLAYER_2_ID, "B", score=2)]

        sort_players_by_score(players)

        assert [p.id for p in players] == [PLAYER_1_ID, PLAYER_2_ID]

    def test_winner_is_first_of_ranking(self):
        players = [
            create_player(PLAYER_1_ID, "A", score=20),
            create_player(PLAYER_2_ID, "B", score=20),
        ]

        assert get_winner(players).id == PLAYER_1_ID

    def test_no_players_no_winner(self):
        assert get_winner([]) is None


class TestNamesAndRounds:
    def test_player_name_known(self, two_player_state: GameState):
        assert player_name(two_player_state, PLAYER_2_ID) == "Brenna"

    def test_player_name_dangling_or_missing(self, two_player_state: GameState):
        assert player_name(two_player_state, "ghost") == UNKNOWN_PLAYER_NAME
        assert player_name(two_player_state, None) == UNKNOWN_PLAYER_NAME

    def test_round_score_defaults_to_zero(self):
        player = create_player(PLAYER_1_ID, "A", round_scores={"1": 3})

        assert round_score(player, 1) == 3
        assert round_score(player, 2) == 0

    def test_events_for_round(self):
        state = GameState(
            game_events=[
                create_event("e1", round_number=1),
                create_event("e2", round_number=2),
                create_event("e3", round_number=1),
            ]
        )

        assert [e.id for e in events_for_round(state, 1)] == ["e1", "e3"]


class TestUnitsAndDuration:
    def test_recorded_units_are_returned(self, two_player_state: GameState):
        unit = Unit(id="u1", name="Raiders", player=PLAYER_1_ID)
        state = two_player_state.model_copy(update={"units": [unit]})

        assert get_all_units(state) == [unit]

    def test_placeholder_units_when_none_recorded(self, two_player_state: GameState):
        units = get_all_units(two_player_state)

        assert len(units) == 6
        assert units[0].id == f"{PLAYER_1_ID}-1"
        assert units[0].name == "Aldric's Unit 1"
        assert units[5].id == f"{PLAYER_2_ID}-3"
        assert units[5].player == PLAYER_2_ID

    def test_duration(self):
        assert game_duration_ms(GameState(game_start_time=1000, game_end_time=61000)) == 60000
        assert game_duration_ms(GameState(game_start_time=1000)) is None
