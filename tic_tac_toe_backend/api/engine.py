"""
Tic Tac Toe game core: board evaluation, game lifecycle and statistics.

Nothing here touches the database or HTTP. Callers load a GameState,
apply a transition and persist the returned value.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional, Tuple, Union

BOARD_SIZE = 9

WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


# PUBLIC_INTERFACE
class GameError(Exception):
    """Base class for every rejected game action."""
    code = "game_error"
    message = "Game action rejected."

    def __init__(self, message=None):
        super().__init__(message or self.message)


class ValidationFailure(GameError):
    code = "invalid_input"


class StateConflict(GameError):
    code = "state_conflict"


class NotFound(GameError):
    code = "not_found"


class AuthorizationFailure(GameError):
    code = "forbidden"


class InvalidPosition(ValidationFailure):
    code = "invalid_position"
    message = "Invalid position. Must be between 0 and 8"


class GameNotFound(NotFound):
    code = "game_not_found"
    message = "Game not found"


class InvalidState(StateConflict):
    code = "invalid_state"
    message = "Game is not in the required state"


class SelfJoin(StateConflict):
    code = "self_join"
    message = "Cannot join your own game"


class AlreadyFull(StateConflict):
    code = "already_full"
    message = "Game already has two players"


class WrongTurn(StateConflict):
    code = "wrong_turn"
    message = "Not your turn"


class CellOccupied(StateConflict):
    code = "cell_occupied"
    message = "Position already occupied"


class NotAParticipant(AuthorizationFailure):
    code = "not_a_participant"
    message = "You are not a player in this game"


class Mark(Enum):
    EMPTY = ""
    X = "X"
    O = "O"

    @property
    def opponent(self) -> "Mark":
        if self is Mark.X:
            return Mark.O
        if self is Mark.O:
            return Mark.X
        raise ValueError("An empty cell has no opponent")


class Outcome(Enum):
    X = "X"
    O = "O"
    DRAW = "D"

    @property
    def mark(self) -> Optional[Mark]:
        return None if self is Outcome.DRAW else Mark(self.value)


class Status(Enum):
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


# PUBLIC_INTERFACE
def check_winner(cells) -> Optional[Outcome]:
    """
    Check for Tic Tac Toe winner or draw.
    Returns Outcome.X, Outcome.O, Outcome.DRAW, or None while the game goes on.
    """
    for a, b, c in WIN_LINES:
        if cells[a] is not Mark.EMPTY and cells[a] == cells[b] == cells[c]:
            return Outcome(cells[a].value)
    if Mark.EMPTY not in cells:
        return Outcome.DRAW
    return None


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class Board:
    """Immutable 3x3 grid stored row by row."""
    cells: Tuple[Mark, ...] = (Mark.EMPTY,) * BOARD_SIZE

    def __post_init__(self):
        if len(self.cells) != BOARD_SIZE:
            raise ValueError(f"A board has exactly {BOARD_SIZE} cells, got {len(self.cells)}")
        if not all(isinstance(cell, Mark) for cell in self.cells):
            raise TypeError("Board cells must be Mark values")

    @classmethod
    def from_symbols(cls, values: Iterable[str]) -> "Board":
        return cls(tuple(Mark(value.strip()) for value in values))

    def to_symbols(self) -> List[str]:
        return [cell.value for cell in self.cells]

    def place(self, position: int, mark: Mark) -> "Board":
        if self.cells[position] is not Mark.EMPTY:
            raise CellOccupied()
        cells = list(self.cells)
        cells[position] = mark
        return Board(tuple(cells))

    @property
    def move_count(self) -> int:
        return sum(1 for cell in self.cells if cell is not Mark.EMPTY)

    def outcome(self) -> Optional[Outcome]:
        return check_winner(self.cells)


@dataclass(frozen=True)
class Waiting:
    pass


@dataclass(frozen=True)
class InProgress:
    player_o: Optional[int]


@dataclass(frozen=True)
class Finished:
    player_o: Optional[int]
    outcome: Outcome
    finished_at: datetime


Phase = Union[Waiting, InProgress, Finished]


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class GameState:
    """
    A single game. Status, opponent and winner all come from `phase`,
    so they can never disagree with each other.
    """
    id: Optional[int]
    player_x: Optional[int]
    created_at: datetime
    phase: Phase = field(default_factory=Waiting)
    board: Board = field(default_factory=Board)
    current_turn: Mark = Mark.X

    @property
    def status(self) -> Status:
        if isinstance(self.phase, Finished):
            return Status.FINISHED
        if isinstance(self.phase, InProgress):
            return Status.IN_PROGRESS
        return Status.WAITING

    @property
    def player_o(self) -> Optional[int]:
        return getattr(self.phase, "player_o", None)

    @property
    def winner(self) -> Optional[Outcome]:
        return getattr(self.phase, "outcome", None)

    @property
    def finished_at(self) -> Optional[datetime]:
        return getattr(self.phase, "finished_at", None)

    def mark_for(self, user_id) -> Optional[Mark]:
        if user_id == self.player_x:
            return Mark.X
        if self.player_o is not None and user_id == self.player_o:
            return Mark.O
        return None


@dataclass(frozen=True)
class MoveResult:
    game: GameState
    outcome: Optional[Outcome]

    @property
    def message(self) -> str:
        if self.outcome is None:
            return "Move made successfully"
        if self.outcome is Outcome.DRAW:
            return "Game ended in a draw"
        return f"Player {self.outcome.value} wins!"


# PUBLIC_INTERFACE
def new_game(player_x: int, now: datetime) -> GameState:
    """Start a game with `player_x` waiting for an opponent."""
    return GameState(id=None, player_x=player_x, created_at=now)


# PUBLIC_INTERFACE
def join_game(game: GameState, joiner_id: int) -> GameState:
    """Seat `joiner_id` as player O. X keeps the first move."""
    if game.status is not Status.WAITING:
        raise InvalidState("Game is not available to join")
    if joiner_id == game.player_x:
        raise SelfJoin()
    if game.player_o is not None:
        raise AlreadyFull()
    return replace(game, phase=InProgress(player_o=joiner_id))


# PUBLIC_INTERFACE
def validate_position(position) -> int:
    """Return `position` as an int in [0, 8] or raise InvalidPosition."""
    if isinstance(position, bool) or position is None:
        raise InvalidPosition()
    if isinstance(position, str):
        text = position.strip()
        try:
            position = int(text)
        except ValueError:
            raise InvalidPosition()
    if not isinstance(position, int) or not 0 <= position < BOARD_SIZE:
        raise InvalidPosition()
    return position


# PUBLIC_INTERFACE
def play_move(game: GameState, actor_id: int, position: int, now: datetime) -> MoveResult:
    """
    Apply `actor_id`'s mark at `position`.

    The turn flips even on the finishing move; once the game is finished the
    turn is never read again.
    """
    position = validate_position(position)
    if game.status is not Status.IN_PROGRESS:
        raise InvalidState("Game is not in progress")
    mark = game.mark_for(actor_id)
    if mark is None:
        raise NotAParticipant()
    if mark is not game.current_turn:
        raise WrongTurn()

    board = game.board.place(position, mark)
    outcome = board.outcome()
    phase = game.phase
    if outcome is not None:
        phase = Finished(player_o=game.player_o, outcome=outcome, finished_at=now)
    updated = replace(game, board=board, phase=phase, current_turn=mark.opponent)
    return MoveResult(game=updated, outcome=outcome)


# PUBLIC_INTERFACE
@dataclass(frozen=True)
class HistoryRecord:
    """Snapshot of a finished game. Statistics are computed from these only."""
    game_id: int
    player_x: Optional[int]
    player_o: Optional[int]
    winner: Optional[int]
    outcome: Outcome
    moves_count: int
    finished_at: datetime
    duration_seconds: Optional[int] = None


def history_record_for(game: GameState) -> HistoryRecord:
    if not isinstance(game.phase, Finished):
        raise InvalidState("Only finished games are recorded")
    if game.id is None:
        raise ValueError("Game must be persisted before it is recorded")
    outcome = game.phase.outcome
    winner = None
    if outcome is Outcome.X:
        winner = game.player_x
    elif outcome is Outcome.O:
        winner = game.player_o
    return HistoryRecord(
        game_id=game.id,
        player_x=game.player_x,
        player_o=game.player_o,
        winner=winner,
        outcome=outcome,
        moves_count=game.board.move_count,
        finished_at=game.phase.finished_at,
        duration_seconds=int((game.phase.finished_at - game.created_at).total_seconds()),
    )


@dataclass(frozen=True)
class Stats:
    total_games: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0

    def to_dict(self) -> dict:
        return {
            "total_games": self.total_games,
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
        }


# PUBLIC_INTERFACE
def compute_stats(user_id: int, records: Iterable[HistoryRecord]) -> Stats:
    """Aggregate a user's record over the history entries they played in."""
    played = [r for r in records if user_id in (r.player_x, r.player_o)]
    wins = sum(1 for r in played if r.outcome is not Outcome.DRAW and _seat(r, r.outcome) == user_id)
    draws = sum(1 for r in played if r.outcome is Outcome.DRAW)
    total = len(played)
    return Stats(total_games=total, wins=wins, losses=total - wins - draws, draws=draws)


def _seat(record: HistoryRecord, outcome: Outcome) -> int:
    return record.player_x if outcome is Outcome.X else record.player_o
