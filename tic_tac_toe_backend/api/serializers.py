from rest_framework import serializers
from django.contrib.auth import get_user_model
from django.contrib.auth.validators import UnicodeUsernameValidator

User = get_user_model()


# PUBLIC_INTERFACE
class UserRegistrationSerializer(serializers.Serializer):
    """
    Serializer for user registration.
    Uniqueness of username/email is checked by the view so it can answer 409.
    """
    username = serializers.CharField(
        min_length=3, max_length=50,
        validators=[UnicodeUsernameValidator()],
        error_messages={
            'min_length': "Username must be between 3 and 50 characters",
            'max_length': "Username must be between 3 and 50 characters",
        },
    )
    email = serializers.EmailField()
    password = serializers.CharField(
        write_only=True, min_length=6,
        error_messages={'min_length': "Password must be at least 6 characters"},
    )

    def create(self, validated_data):
        user = User.objects.create_user(
            username=validated_data['username'],
            email=validated_data['email'],
            password=validated_data['password'],
        )
        return user


# PUBLIC_INTERFACE
class LoginSerializer(serializers.Serializer):
    """
    Login credentials; `username` may also hold the email address.
    """
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)


# PUBLIC_INTERFACE
class UserProfileSerializer(serializers.ModelSerializer):
    """
    Public user profile serializer.
    """
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'date_joined', 'last_login']


# PUBLIC_INTERFACE
class GameSerializer(serializers.Serializer):
    """
    Serializer for api.engine.GameState, the shape polled by the client.
    """
    id = serializers.IntegerField()
    player_x_id = serializers.IntegerField(source='player_x', allow_null=True)
    player_o_id = serializers.IntegerField(source='player_o', allow_null=True)
    board = serializers.SerializerMethodField()
    current_turn = serializers.SerializerMethodField()
    winner = serializers.SerializerMethodField()
    status = serializers.SerializerMethodField()
    created_at = serializers.DateTimeField()
    finished_at = serializers.DateTimeField(allow_null=True)

    def get_board(self, game):
        return game.board.to_symbols()

    def get_current_turn(self, game):
        return game.current_turn.value

    def get_winner(self, game):
        return game.winner.value if game.winner else None

    def get_status(self, game):
        return game.status.value


# PUBLIC_INTERFACE
class HistoryRecordSerializer(serializers.Serializer):
    """
    Serializer for api.engine.HistoryRecord.
    """
    game_id = serializers.IntegerField()
    player_x_id = serializers.IntegerField(source='player_x', allow_null=True)
    player_o_id = serializers.IntegerField(source='player_o', allow_null=True)
    winner_id = serializers.IntegerField(source='winner', allow_null=True)
    outcome = serializers.SerializerMethodField()
    moves_count = serializers.IntegerField()
    duration_seconds = serializers.IntegerField(allow_null=True)
    finished_at = serializers.DateTimeField()

    def get_outcome(self, record):
        return record.outcome.value


# PUBLIC_INTERFACE
class StatsSerializer(serializers.Serializer):
    """
    Win/loss/draw totals derived from the history records.
    """
    total_games = serializers.IntegerField()
    wins = serializers.IntegerField()
    losses = serializers.IntegerField()
    draws = serializers.IntegerField()
