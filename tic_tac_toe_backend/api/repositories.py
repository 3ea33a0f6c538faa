from __future__ import annotations

from typing import ContextManager, List, Optional, Protocol

from django.db import transaction
from django.db.models import Q

from .engine import (
    Board,
    Finished,
    GameState,
    HistoryRecord,
    InProgress,
    Mark,
    Outcome,
    Status,
    Waiting,
)
from .models import EMPTY_BOARD, Game, GameHistory


class GameRepository(Protocol):
    """
    Abstraction over game and history persistence.

    Implementations map between stored rows and the `GameState` /
    `HistoryRecord` values of `api.engine`. A game read with
    `for_update=True` inside `atomic()` must not be modified by any other
    writer until the block exits.
    """

    def atomic(self) -> ContextManager:
        """Return a context manager spanning one read-validate-write unit."""

        ...

    def add_game(self, game: GameState) -> GameState:
        """Persist a new game and return it with its assigned id."""

        ...

    def get_game(self, game_id: int, for_update: bool = False) -> Optional[GameState]:
        ...

    def list_games(self, status: Optional[Status] = None) -> List[GameState]:
        """Return games newest first, optionally restricted to one status."""

        ...

    def save_game(self, game: GameState) -> None:
        ...

    def add_history(self, record: HistoryRecord) -> None:
        """Persist a history record. A game can only ever have one."""

        ...

    def history_for_user(self, user_id: int) -> List[HistoryRecord]:
        """Return the history records the user played in, newest first."""

        ...


class DjangoGameRepository(GameRepository):
    """
    ORM-backed implementation of `GameRepository`.

    Row locking comes from `select_for_update()`; on backends without row
    locks (SQLite) the whole database is serialised by the write lock.
    """

    def atomic(self):
        return transaction.atomic()

    @staticmethod
    def _to_domain(row: Game) -> GameState:
        board = Board.from_symbols(row.board_state.ljust(len(EMPTY_BOARD)))
        if row.winner:
            phase = Finished(
                player_o=row.player_o_id,
                outcome=Outcome(row.winner),
                finished_at=row.finished_at,
            )
        elif row.player_o_id is not None:
            phase = InProgress(player_o=row.player_o_id)
        else:
            phase = Waiting()
        return GameState(
            id=row.pk,
            player_x=row.player_x_id,
            created_at=row.created_at,
            phase=phase,
            board=board,
            current_turn=Mark(row.current_turn),
        )

    @staticmethod
    def _apply(row: Game, game: GameState) -> None:
        row.player_x_id = game.player_x
        row.player_o_id = game.player_o
        row.board_state = ''.join(symbol or ' ' for symbol in game.board.to_symbols())
        row.current_turn = game.current_turn.value
        row.winner = game.winner.value if game.winner else None
        row.status = game.status.value
        row.finished_at = game.finished_at

    @staticmethod
    def _history_to_domain(row: GameHistory) -> HistoryRecord:
        return HistoryRecord(
            game_id=row.game_id,
            player_x=row.player_x_id,
            player_o=row.player_o_id,
            winner=row.winner_id,
            outcome=Outcome(row.outcome),
            moves_count=row.moves_count,
            finished_at=row.finished_at,
            duration_seconds=row.duration_seconds,
        )

    def add_game(self, game: GameState) -> GameState:
        row = Game()
        self._apply(row, game)
        row.save()
        return self._to_domain(row)

    def get_game(self, game_id: int, for_update: bool = False) -> Optional[GameState]:
        queryset = Game.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        row = queryset.filter(pk=game_id).first()
        if row is None:
            return None
        return self._to_domain(row)

    def list_games(self, status: Optional[Status] = None) -> List[GameState]:
        queryset = Game.objects.order_by('-created_at', '-id')
        if status is not None:
            queryset = queryset.filter(status=status.value)
        return [self._to_domain(row) for row in queryset]

    def save_game(self, game: GameState) -> None:
        row = Game.objects.get(pk=game.id)
        self._apply(row, game)
        row.save(update_fields=[
            'player_x', 'player_o', 'board_state', 'current_turn',
            'winner', 'status', 'finished_at',
        ])

    def add_history(self, record: HistoryRecord) -> None:
        GameHistory.objects.create(
            game_id=record.game_id,
            player_x_id=record.player_x,
            player_o_id=record.player_o,
            winner_id=record.winner,
            outcome=record.outcome.value,
            moves_count=record.moves_count,
            duration_seconds=record.duration_seconds,
            finished_at=record.finished_at,
        )

    def history_for_user(self, user_id: int) -> List[HistoryRecord]:
        rows = GameHistory.objects.filter(Q(player_x_id=user_id) | Q(player_o_id=user_id))
        return [self._history_to_domain(row) for row in rows.order_by('-finished_at', '-id')]
