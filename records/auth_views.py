"""
Registration, login and token lifecycle views.

Passwords are hashed by Django's auth framework and tokens are issued by
simplejwt; nothing here implements credentials itself.  Kept apart from
``records.authentication`` so DRF can import the authentication class
without pulling in views.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.models import update_last_login
from django.db import IntegrityError, transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import AuthenticationFailed, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken

from records.exceptions import Conflict
from records.serializers.auth import LoginSerializer, RegisterSerializer
from records.services.audit import log_action

User = get_user_model()
logger = logging.getLogger(__name__)


def _client_ip(request):
    return request.META.get('REMOTE_ADDR')


# ---------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def register_view(request):
    """Create a user account from ``username`` and ``password`` (6+ chars)."""
    s = RegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']
    if User.objects.filter(username=username).exists():
        raise Conflict('username already exists')
    try:
        with transaction.atomic():
            user = User.objects.create_user(username=username, password=s.validated_data['password'])
    except IntegrityError:
        # lost a race with a concurrent registration
        raise Conflict('username already exists')
    log_action(user=user, action='register', object_type='user', object_id=user.id,
               detail={'ip': _client_ip(request)})
    logger.info('user %s registered', user.id)
    return Response({'ok': True, 'id': user.id, 'username': user.username}, status=status.HTTP_201_CREATED)

register_view.cls.throttle_scope = 'register'


# ---------------------------------------------------------------------
# Username/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    """Exchange credentials for an access token and a refresh token."""
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']

    user = authenticate(request, username=username, password=s.validated_data['password'])
    if not user:
        # only the attempted username is recorded
        log_action(user=None, action='login', object_type='user',
                   detail={'result': 'fail', 'username': username, 'ip': _client_ip(request)})
        raise AuthenticationFailed('invalid credentials')

    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': _client_ip(request)})
    update_last_login(None, user)
    refresh = RefreshToken.for_user(user)
    return Response({
        'ok': True,
        'token': str(refresh.access_token),
        'refresh': str(refresh),
        'username': user.username,
    }, status=200)

login_view.cls.throttle_scope = 'login'


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    s = TokenRefreshSerializer(data=request.data)
    try:
        s.is_valid(raise_exception=True)
    except TokenError as e:
        raise InvalidToken(e.args[0])
    data = dict(s.validated_data)
    payload = {'ok': True, 'token': data.pop('access')}
    if 'refresh' in data:
        payload['refresh'] = data['refresh']
    return Response(payload)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist one refresh token, or every outstanding one for the caller."""
    refresh = request.data.get('refresh')
    if refresh:
        try:
            token = RefreshToken(refresh)
        except TokenError as e:
            raise ValidationError({'refresh': [str(e)]})
        if str(token.get('user_id')) != str(request.user.pk):
            raise ValidationError({'refresh': ['token does not belong to this user']})
        token.blacklist()
        return Response({'ok': True, 'blacklisted': 1})
    count = 0
    for token in OutstandingToken.objects.filter(user=request.user):
        _, created = BlacklistedToken.objects.get_or_create(token=token)
        count += int(created)
    return Response({'ok': True, 'blacklisted': count})
