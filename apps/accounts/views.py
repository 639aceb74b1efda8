"""
Account API views.

POST /api/auth/register/       - Create a member and email security codes
POST /api/auth/login/          - Spend a security code for JWT tokens
POST /api/auth/request-codes/  - Replace the code batch (once per 7 days)
POST /api/auth/refresh/        - Rotate the refresh token
GET  /api/auth/me/             - Current member
POST /api/auth/logout/         - Blacklist the refresh token, drop the cookie
"""

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from apps.core.exceptions import ValidationError
from apps.core.throttling import AuthEndpointThrottle

from . import services
from .authentication import clear_auth_cookie, set_auth_cookie
from .serializers import (
    EmailSerializer,
    LoginSerializer,
    LogoutSerializer,
    MemberSerializer,
    MemberUpdateSerializer,
)


class RegisterView(APIView):
    """
    Register with an email address.

    POST /api/auth/register/
    Body: {"email": "..."}
    """
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [AuthEndpointThrottle]

    def post(self, request):
        serializer = EmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        member, _codes = services.register_member(serializer.validated_data['email'])

        return Response(
            {
                'message': 'Registration successful. Check your email for security codes.',
                'user_id': str(member.pk),
            },
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    """
    Log in with an email and an unused security code.

    POST /api/auth/login/
    Body: {"email": "...", "security_code": "..."}
    Returns: {"access": "...", "refresh": "...", "codes_remaining": N, "user": {...}}
    """
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [AuthEndpointThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        member, codes_remaining = services.authenticate_with_code(
            serializer.validated_data['email'],
            serializer.validated_data['security_code'],
        )

        refresh = RefreshToken.for_user(member)
        # Each read of access_token mints a new jti
        access = str(refresh.access_token)
        response = Response({
            'message': 'Login successful',
            'access': access,
            'refresh': str(refresh),
            'codes_remaining': codes_remaining,
            'user': MemberSerializer(member).data,
        })
        return set_auth_cookie(response, access)


class RequestCodesView(APIView):
    """
    Request a new batch of security codes.

    POST /api/auth/request-codes/
    Body: {"email": "..."}
    """
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [AuthEndpointThrottle]

    def post(self, request):
        serializer = EmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        member = services.refresh_security_codes(serializer.validated_data['email'])

        return Response({
            'message': 'New security codes sent to your email. Next refresh allowed in 7 days.',
            'next_refresh_allowed': member.next_refresh_allowed,
        })


class CookieTokenRefreshView(TokenRefreshView):
    """
    Token refresh endpoint.

    POST /api/auth/refresh/
    Body: {"refresh": "..."}
    Returns: {"access": "...", "refresh": "..."} and refreshes the cookie.
    """
    authentication_classes = []
    permission_classes = [AllowAny]
    throttle_classes = [AuthEndpointThrottle]

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        if response.status_code == status.HTTP_200_OK and 'access' in response.data:
            set_auth_cookie(response, response.data['access'])
        return response


class CurrentMemberView(APIView):
    """
    Get or update the current member.

    GET /api/auth/me/ - Current member info
    PATCH /api/auth/me/ - Update username / avatar
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        return Response(MemberSerializer(request.user).data)

    def patch(self, request):
        serializer = MemberUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(MemberSerializer(request.user).data)


class LogoutView(APIView):
    """
    Logout endpoint.

    POST /api/auth/logout/
    Body: {"refresh": "..."} (optional)
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        refresh_token = serializer.validated_data.get('refresh')
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError as e:
                raise ValidationError(str(e), field='refresh') from e

        response = Response({'message': 'Successfully logged out'})
        return clear_auth_cookie(response)
