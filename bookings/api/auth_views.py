"""
Session authentication endpoints and the current user's profile.
"""
import logging
from typing import Any, Dict, cast

from django.contrib.auth import authenticate, login, logout
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from bookings.services import ProfileService, UserService
from bookings.validation import Unauthorized

from .response import APIResponse
from .serializers import LoginSerializer, ProfileUpdateSerializer, RegisterSerializer, UserSerializer

logger = logging.getLogger(__name__)


class RegisterView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(summary="Register", request=RegisterSerializer, responses={201: UserSerializer})
    def post(self, request: Request) -> Response:
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = cast(Dict[str, Any], serializer.validated_data)

        user = UserService.register(
            email=data["email"],
            password=data["password"],
            name=data.get("name", ""),
            business_name=data.get("business_name", ""),
        )
        login(request, user, backend="django.contrib.auth.backends.ModelBackend")
        return APIResponse.success(
            data=UserSerializer(user).data,
            message="Account created.",
            status_code=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]

    @extend_schema(summary="Log in", request=LoginSerializer, responses={200: UserSerializer})
    def post(self, request: Request) -> Response:
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = cast(Dict[str, Any], serializer.validated_data)

        user = authenticate(request, username=data["email"].strip().lower(), password=data["password"])
        if user is None:
            logger.warning(f"Failed login attempt for {data['email']}")
            raise Unauthorized("Invalid email or password")

        login(request, user)
        return APIResponse.success(data=UserSerializer(user).data, message="Logged in.")


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Log out", request=None)
    def post(self, request: Request) -> Response:
        logout(request)
        return APIResponse.success(message="Logged out.")


class CurrentUserView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Current user", responses={200: UserSerializer})
    def get(self, request: Request) -> Response:
        return Response(UserSerializer(request.user).data)


class ProfileView(APIView):
    permission_classes = [IsAuthenticated]

    def _update(self, request: Request, partial: bool) -> Response:
        serializer = ProfileUpdateSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        ProfileService.update_profile(request.user, cast(Dict[str, Any], serializer.validated_data))
        request.user.refresh_from_db()
        return Response(UserSerializer(request.user).data)

    @extend_schema(summary="Update profile", request=ProfileUpdateSerializer, responses={200: UserSerializer})
    def put(self, request: Request) -> Response:
        return self._update(request, partial=False)

    @extend_schema(summary="Partial update profile", request=ProfileUpdateSerializer, responses={200: UserSerializer})
    def patch(self, request: Request) -> Response:
        return self._update(request, partial=True)
