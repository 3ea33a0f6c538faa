import unittest
from datetime import datetime, timedelta

from api.engine import (
    Board,
    CellOccupied,
    Finished,
    GameState,
    HistoryRecord,
    InvalidPosition,
    InvalidState,
    Mark,
    NotAParticipant,
    Outcome,
    SelfJoin,
    Status,
    WIN_LINES,
    WrongTurn,
    check_winner,
    compute_stats,
    history_record_for,
    join_game,
    new_game,
    play_move,
    validate_position,
)

PLAYER_X = 1
PLAYER_O = 2
OUTSIDER = 3
START = datetime(2024, 1, 1, 12, 0, 0)

# X takes the top row while O plays 3 and 4.
TOP_ROW_WIN = [(PLAYER_X, 0), (PLAYER_O, 3), (PLAYER_X, 1), (PLAYER_O, 4), (PLAYER_X, 2)]
# Fills the board without a line: X O X / X O O / O X X
DRAW_SEQUENCE = [
    (PLAYER_X, 0), (PLAYER_O, 1), (PLAYER_X, 2), (PLAYER_O, 4), (PLAYER_X, 3),
    (PLAYER_O, 5), (PLAYER_X, 7), (PLAYER_O, 6), (PLAYER_X, 8),
]


def board_of(layout: str) -> Board:
    return Board.from_symbols(layout)


def started_game() -> GameState:
    return join_game(GameState(id=7, player_x=PLAYER_X, created_at=START), PLAYER_O)


def play_all(game, moves):
    result = None
    for index, (actor, position) in enumerate(moves):
        result = play_move(game, actor, position, START + timedelta(seconds=index + 1))
        game = result.game
    return result


class BoardTests(unittest.TestCase):
    def test_every_line_is_a_win_for_either_mark(self):
        for line in WIN_LINES:
            for mark in (Mark.X, Mark.O):
                cells = [Mark.EMPTY] * 9
                for index in line:
                    cells[index] = mark
                self.assertEqual(check_winner(tuple(cells)), Outcome(mark.value), line)

    def test_full_board_without_line_is_a_draw(self):
        self.assertIs(board_of("XOXXOOOXX").outcome(), Outcome.DRAW)

    def test_open_board_has_no_decision(self):
        self.assertIsNone(Board().outcome())
        self.assertIsNone(board_of("XO       ").outcome())

    def test_win_on_last_cell_beats_draw(self):
        self.assertIs(board_of("XOXOXOOXX").outcome(), Outcome.X)

    def test_evaluation_is_deterministic(self):
        board = board_of("XXOOOXXOX")
        self.assertEqual({board.outcome() for _ in range(5)}, {board.outcome()})

    def test_board_requires_nine_cells(self):
        with self.assertRaises(ValueError):
            Board((Mark.EMPTY,) * 8)

    def test_place_returns_new_board_and_refuses_occupied_cells(self):
        board = Board().place(4, Mark.X)
        self.assertEqual(board.to_symbols()[4], "X")
        self.assertEqual(Board().move_count, 0)
        with self.assertRaises(CellOccupied):
            board.place(4, Mark.O)

    def test_persisted_blanks_are_read_as_empty(self):
        self.assertEqual(board_of("X   O    ").to_symbols(), ["X", "", "", "", "O", "", "", "", ""])


class PositionTests(unittest.TestCase):
    def test_accepts_board_indexes(self):
        self.assertEqual([validate_position(p) for p in range(9)], list(range(9)))
        self.assertEqual(validate_position("5"), 5)

    def test_rejects_everything_else(self):
        for bad in (-1, 9, 10, None, True, 2.0, "two", "", [1], "--1", "-+1", "\u00b2", "9"):
            with self.assertRaises(InvalidPosition, msg=repr(bad)):
                validate_position(bad)


class LifecycleTests(unittest.TestCase):
    def test_new_game_waits_for_an_opponent(self):
        game = new_game(PLAYER_X, START)
        self.assertIs(game.status, Status.WAITING)
        self.assertIsNone(game.player_o)
        self.assertIsNone(game.winner)
        self.assertIs(game.current_turn, Mark.X)
        self.assertEqual(game.board.to_symbols(), [""] * 9)

    def test_join_starts_the_game_with_x_to_move(self):
        game = started_game()
        self.assertIs(game.status, Status.IN_PROGRESS)
        self.assertEqual(game.player_o, PLAYER_O)
        self.assertIs(game.current_turn, Mark.X)

    def test_cannot_join_own_game(self):
        with self.assertRaises(SelfJoin):
            join_game(new_game(PLAYER_X, START), PLAYER_X)

    def test_cannot_join_a_started_game(self):
        with self.assertRaises(InvalidState):
            join_game(started_game(), OUTSIDER)

    def test_moves_before_join_are_rejected(self):
        with self.assertRaises(InvalidState):
            play_move(new_game(PLAYER_X, START), PLAYER_X, 0, START)

    def test_turn_alternates_with_every_move(self):
        game = started_game()
        for count, (actor, position) in enumerate(DRAW_SEQUENCE[:-1], start=1):
            game = play_move(game, actor, position, START).game
            expected = Mark.X if count % 2 == 0 else Mark.O
            self.assertIs(game.current_turn, expected)
            self.assertEqual(game.board.move_count, count)

    def test_wrong_turn_and_outsiders_are_rejected(self):
        game = started_game()
        with self.assertRaises(WrongTurn):
            play_move(game, PLAYER_O, 0, START)
        with self.assertRaises(NotAParticipant):
            play_move(game, OUTSIDER, 0, START)

    def test_occupied_cell_leaves_board_unchanged(self):
        game = play_move(started_game(), PLAYER_X, 0, START).game
        with self.assertRaises(CellOccupied):
            play_move(game, PLAYER_O, 0, START)
        self.assertEqual(game.board.to_symbols()[0], "X")
        self.assertIs(game.current_turn, Mark.O)

    def test_top_row_wins_for_x(self):
        result = play_all(started_game(), TOP_ROW_WIN)
        self.assertIs(result.outcome, Outcome.X)
        self.assertIs(result.game.status, Status.FINISHED)
        self.assertIs(result.game.winner, Outcome.X)
        self.assertEqual(result.game.finished_at, START + timedelta(seconds=5))
        self.assertIn("wins", result.message)
        # The turn still flips on the finishing move.
        self.assertIs(result.game.current_turn, Mark.O)

    def test_full_board_is_a_draw(self):
        result = play_all(started_game(), DRAW_SEQUENCE)
        self.assertIs(result.game.winner, Outcome.DRAW)
        self.assertIs(result.game.status, Status.FINISHED)
        self.assertEqual(result.message, "Game ended in a draw")

    def test_no_move_succeeds_after_the_game_is_finished(self):
        finished = play_all(started_game(), TOP_ROW_WIN).game
        for actor in (PLAYER_X, PLAYER_O, OUTSIDER):
            for position in (5, 6):
                with self.assertRaises(InvalidState):
                    play_move(finished, actor, position, START)

    def test_ongoing_move_reports_plain_message(self):
        result = play_move(started_game(), PLAYER_X, 4, START)
        self.assertIsNone(result.outcome)
        self.assertEqual(result.message, "Move made successfully")


class HistoryTests(unittest.TestCase):
    def test_record_for_a_win(self):
        game = play_all(started_game(), TOP_ROW_WIN).game
        record = history_record_for(game)
        self.assertEqual(record.game_id, 7)
        self.assertEqual(record.winner, PLAYER_X)
        self.assertEqual(record.moves_count, 5)
        self.assertEqual(record.duration_seconds, 5)

    def test_record_for_a_draw_has_no_winner(self):
        record = history_record_for(play_all(started_game(), DRAW_SEQUENCE).game)
        self.assertIsNone(record.winner)
        self.assertIs(record.outcome, Outcome.DRAW)
        self.assertEqual(record.moves_count, 9)

    def test_unfinished_games_are_not_recorded(self):
        with self.assertRaises(InvalidState):
            history_record_for(started_game())

    def test_stats_add_up(self):
        records = [
            HistoryRecord(1, PLAYER_X, PLAYER_O, PLAYER_X, Outcome.X, 5, START),
            HistoryRecord(2, PLAYER_O, PLAYER_X, PLAYER_O, Outcome.X, 7, START),
            HistoryRecord(3, PLAYER_X, PLAYER_O, None, Outcome.DRAW, 9, START),
            HistoryRecord(4, PLAYER_O, OUTSIDER, OUTSIDER, Outcome.O, 6, START),
        ]
        stats = compute_stats(PLAYER_X, records)
        self.assertEqual((stats.total_games, stats.wins, stats.losses, stats.draws), (3, 1, 1, 1))
        for user in (PLAYER_X, PLAYER_O, OUTSIDER, 99):
            stats = compute_stats(user, records)
            self.assertEqual(stats.wins + stats.losses + stats.draws, stats.total_games)

    def test_stats_use_outcome_when_winner_reference_is_gone(self):
        records = [HistoryRecord(1, PLAYER_X, PLAYER_O, None, Outcome.O, 6, START)]
        stats = compute_stats(PLAYER_O, records)
        self.assertEqual(stats.wins, 1)
        self.assertEqual(stats.draws, 0)

    def test_finished_phase_carries_outcome(self):
        phase = Finished(player_o=PLAYER_O, outcome=Outcome.DRAW, finished_at=START)
        game = GameState(id=1, player_x=PLAYER_X, created_at=START, phase=phase)
        self.assertIs(game.status, Status.FINISHED)
        self.assertIsNone(game.winner.mark)


if __name__ == "__main__":
    unittest.main()
