from django.db import models
from django.contrib.auth.models import AbstractUser

EMPTY_BOARD = ' ' * 9


# PUBLIC_INTERFACE
class User(AbstractUser):
    """
    Custom user model
    Username and email are both unique; either one can be used to log in.
    """
    email = models.EmailField('email address', unique=True)


# PUBLIC_INTERFACE
class Game(models.Model):
    """
    Stores a Tic Tac Toe game between two users.
    Flat persisted shape of api.engine.GameState; always written through the repository.
    """
    STATUS_CHOICES = [
        ('waiting', "Waiting for second player"),
        ('in_progress', "Game in progress"),
        ('finished', "Game finished"),
    ]
    TURN_CHOICES = [('X', 'X'), ('O', 'O')]
    WINNER_CHOICES = [('X', 'X'), ('O', 'O'), ('D', 'Draw')]

    player_x = models.ForeignKey(User, on_delete=models.SET_NULL, related_name='games_as_x', null=True)
    player_o = models.ForeignKey(User, on_delete=models.SET_NULL, related_name='games_as_o', null=True, blank=True)
    board_state = models.CharField(max_length=9, default=EMPTY_BOARD)  # serialized flat string, e.g. 'XXO OX   '
    current_turn = models.CharField(max_length=1, choices=TURN_CHOICES, default='X')
    winner = models.CharField(max_length=1, choices=WINNER_CHOICES, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='waiting', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    finished_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Game {self.pk}: {self.player_x.username if self.player_x else '[deleted]'} vs {self.player_o.username if self.player_o else '...'}"


# PUBLIC_INTERFACE
class GameHistory(models.Model):
    """
    Immutable record of a finished game, written in the same transaction as the finishing move.
    """
    game = models.OneToOneField(Game, on_delete=models.CASCADE, related_name='history')
    player_x = models.ForeignKey(User, on_delete=models.SET_NULL, related_name='history_as_x', null=True)
    player_o = models.ForeignKey(User, on_delete=models.SET_NULL, related_name='history_as_o', null=True)
    winner = models.ForeignKey(User, on_delete=models.SET_NULL, related_name='history_won', null=True, blank=True)
    outcome = models.CharField(max_length=1, choices=Game.WINNER_CHOICES)
    moves_count = models.PositiveSmallIntegerField()
    duration_seconds = models.PositiveIntegerField(null=True, blank=True)
    finished_at = models.DateTimeField()

    class Meta:
        ordering = ['-finished_at', '-id']
        verbose_name_plural = 'game history'

    def __str__(self):
        return f"History for game {self.game_id}: {self.get_outcome_display()}"
