import logging

from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework import status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.models import update_last_login
from django.db import DatabaseError, IntegrityError, connection
from django.db.models import Q
from django.utils import timezone

from .engine import Status
from .repositories import DjangoGameRepository
from .serializers import (
    GameSerializer,
    HistoryRecordSerializer,
    LoginSerializer,
    StatsSerializer,
    UserProfileSerializer,
    UserRegistrationSerializer,
)
from .services import GameService

User = get_user_model()
logger = logging.getLogger(__name__)


def get_game_service():
    return GameService(DjangoGameRepository())


def _token_response(user, status_code):
    refresh = RefreshToken.for_user(user)
    return Response({
        "user": UserProfileSerializer(user).data,
        "refresh": str(refresh),
        "access": str(refresh.access_token)
    }, status=status_code)


# PUBLIC_INTERFACE
@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    """Health endpoint for server and database status check."""
    try:
        connection.ensure_connection()
    except DatabaseError:
        logger.exception("Health check could not reach the database")
        return Response(
            {"status": "ERROR", "message": "Database connection failed"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return Response({
        "status": "OK",
        "message": "Server is up!",
        "database": "Connected",
        "timestamp": timezone.now(),
    })


# PUBLIC_INTERFACE
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """
    Register a new user.
    ---
    Request body:
        username: str (3-50 characters)
        email: str
        password: str (at least 6 characters)
    Response:
        User profile with refresh/access tokens, 409 if username or email is taken.
    """
    serializer = UserRegistrationSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    username = serializer.validated_data['username']
    email = serializer.validated_data['email']
    if User.objects.filter(Q(username__iexact=username) | Q(email__iexact=email)
                           | Q(email__iexact=username) | Q(username__iexact=email)).exists():
        return Response({"detail": "Username or email already exists"}, status=status.HTTP_409_CONFLICT)
    try:
        user = serializer.save()
    except IntegrityError:
        return Response({"detail": "Username or email already exists"}, status=status.HTTP_409_CONFLICT)

    logger.info("Registered user %s", user.pk)
    update_last_login(None, user)
    return _token_response(user, status.HTTP_201_CREATED)


# PUBLIC_INTERFACE
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """
    Login a user and return JWT tokens.
    ---
    Request body:
        username: str (username or email)
        password: str
    Response:
        Access/Refresh tokens and user profile.
    """
    serializer = LoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    user = authenticate(
        request,
        username=serializer.validated_data['username'],
        password=serializer.validated_data['password'],
    )
    if not user:
        return Response({"detail": "Invalid credentials"}, status=status.HTTP_401_UNAUTHORIZED)
    update_last_login(None, user)
    return _token_response(user, status.HTTP_200_OK)


# PUBLIC_INTERFACE
class ProfileView(APIView):
    """
    Get the authenticated user's profile and game stats.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        stats = get_game_service().get_stats(request.user.pk)
        data = UserProfileSerializer(request.user).data
        data['stats'] = StatsSerializer(stats).data
        return Response(data)


# PUBLIC_INTERFACE
class GameViewSet(viewsets.ViewSet):
    """
    Game endpoints - create, list, get board, join, stats
    """
    permission_classes = [IsAuthenticated]
    lookup_value_regex = r'\d+'

    def list(self, request):
        """
        List games newest first, optionally filtered with ?status=waiting|in_progress|finished.
        """
        status_filter = request.query_params.get('status')
        if status_filter:
            try:
                games = get_game_service().list_games(Status(status_filter))
            except ValueError:
                games = []
        else:
            games = get_game_service().list_games()
        return Response({"games": GameSerializer(games, many=True).data})

    def create(self, request):
        """
        Start a new game with the current user as player X.
        """
        game = get_game_service().create_game(request.user.pk)
        return Response(
            {"message": "Game created successfully", "game": GameSerializer(game).data},
            status=status.HTTP_201_CREATED,
        )

    def retrieve(self, request, pk=None):
        """
        Get game board and status for given game id.
        """
        game = get_game_service().get_game(int(pk))
        return Response({"game": GameSerializer(game).data})

    @action(detail=True, methods=['post'])
    def join(self, request, pk=None):
        """
        Join a waiting game as player O.
        """
        game = get_game_service().join_game(int(pk), request.user.pk)
        return Response({"message": "Joined game successfully", "game": GameSerializer(game).data})

    @action(detail=False, methods=['get'], url_path='stats/me')
    def stats(self, request):
        """
        Win/loss/draw statistics for the current user.
        """
        stats = get_game_service().get_stats(request.user.pk)
        return Response({"stats": StatsSerializer(stats).data})


# PUBLIC_INTERFACE
class MoveView(APIView):
    """
    Make a move in a game.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        """
        Make a move as current user in specified game.
        Expects:
            position: int (0-8)
        Enforces turn order, symbol assignment, win/draw conditions.
        """
        result = get_game_service().make_move(pk, request.user.pk, request.data.get('position'))
        return Response({"message": result.message, "game": GameSerializer(result.game).data})


# PUBLIC_INTERFACE
class GameHistoryView(APIView):
    """
    Get game history for the current user.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        records = get_game_service().get_history(request.user.pk)
        return Response({"history": HistoryRecordSerializer(records, many=True).data})
