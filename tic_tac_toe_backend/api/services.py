"""
Game service: runs the engine transitions against a repository.

Each mutating operation reads the game under lock, validates, and writes the
result back inside a single repository transaction.
"""
import logging
from typing import Callable, List, Optional

from django.utils import timezone

from . import engine
from .engine import GameNotFound, GameState, HistoryRecord, MoveResult, Stats, Status
from .repositories import GameRepository

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class GameService:
    """
    Boundary operations for the game platform.

    Identities passed in are trusted as already authenticated.
    """

    def __init__(self, repository: GameRepository, clock: Callable = timezone.now):
        self.repository = repository
        self.clock = clock

    def create_game(self, actor_id: int) -> GameState:
        game = self.repository.add_game(engine.new_game(actor_id, self.clock()))
        logger.info("Game %s created by user %s", game.id, actor_id)
        return game

    def list_games(self, status: Optional[Status] = None) -> List[GameState]:
        return self.repository.list_games(status)

    def get_game(self, game_id: int) -> GameState:
        game = self.repository.get_game(game_id)
        if game is None:
            raise GameNotFound()
        return game

    def join_game(self, game_id: int, actor_id: int) -> GameState:
        with self.repository.atomic():
            game = self._locked(game_id)
            joined = engine.join_game(game, actor_id)
            self.repository.save_game(joined)
        logger.info("User %s joined game %s", actor_id, game_id)
        return joined

    def make_move(self, game_id: int, actor_id: int, position) -> MoveResult:
        position = engine.validate_position(position)
        with self.repository.atomic():
            game = self._locked(game_id)
            result = engine.play_move(game, actor_id, position, self.clock())
            self.repository.save_game(result.game)
            if result.outcome is not None:
                self._record_completion(result.game)
        logger.debug("User %s played %s in game %s", actor_id, position, game_id)
        return result

    def get_stats(self, user_id: int) -> Stats:
        return engine.compute_stats(user_id, self.repository.history_for_user(user_id))

    def get_history(self, user_id: int) -> List[HistoryRecord]:
        return self.repository.history_for_user(user_id)

    def _locked(self, game_id: int) -> GameState:
        game = self.repository.get_game(game_id, for_update=True)
        if game is None:
            raise GameNotFound()
        return game

    def _record_completion(self, game: GameState) -> None:
        record = engine.history_record_for(game)
        self.repository.add_history(record)
        logger.info(
            "Game %s finished: outcome=%s moves=%s",
            game.id, record.outcome.value, record.moves_count,
        )
