import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db.models import Q
from django.db.models.deletion import ProtectedError
from django.utils import timezone
from .models import CompanyProfile, Setting, DashboardSettings, AuditLog
from .permissions import IsAdminRole
from .serializers import (
    UserSerializer, UserCreateSerializer, SignupSerializer,
    CompanySignupSerializer, AdminSetupSerializer, CompanyProfileSerializer,
    SettingSerializer, DashboardSettingsSerializer, AuditLogSerializer
)
from .utils import create_audit_log, get_company_info, paginated_response

logger = logging.getLogger(__name__)

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


def _token_response(user, status_code=status.HTTP_201_CREATED):
    token = CustomTokenObtainPairSerializer.get_token(user)
    return Response({
        'user': UserSerializer(user).data,
        'access': str(token.access_token),
        'refresh': str(token),
    }, status=status_code)


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Pet owner signup with at least one pet"""
    serializer = SignupSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        logger.info(f"New pet owner registered: {user.username} with {user.pets.count()} pet(s)")
        return _token_response(user)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([AllowAny])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def company_signup(request):
    """B2B company signup. The account waits for admin approval"""
    serializer = CompanySignupSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        profile = user.company_profile
        create_audit_log(
            request=request,
            user=user,
            action='create',
            model_name='CompanyProfile',
            object_id=profile.id,
            object_name=profile.company_name,
            object_reference=profile.business_number,
        )
        logger.info(f"Company signup pending approval: {profile.company_name} ({profile.business_number})")
        return Response({
            'user': UserSerializer(user).data,
            'company': CompanyProfileSerializer(profile).data,
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def admin_setup(request):
    """Report whether an administrator exists, or create the first one"""
    admin_exists = User.objects.filter(role='admin').exists()
    if request.method == 'GET':
        return Response({'admin_exists': admin_exists})

    if admin_exists:
        logger.warning("Admin setup attempted after an administrator already exists")
        return Response({'detail': 'An administrator account already exists.'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AdminSetupSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        logger.info(f"Administrator account created: {user.username}")
        return _token_response(user)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user with company profile and access flags"""
    user = request.user
    user_data = UserSerializer(user).data

    profile = getattr(user, 'company_profile', None)
    user_data['company'] = CompanyProfileSerializer(profile).data if profile else None
    user_data['is_admin'] = user.role == 'admin' or user.is_staff or user.is_superuser
    user_data['can_access_b2b'] = bool(profile and profile.is_approved)
    return Response(user_data)


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_list_create(request):
    """List all users or create a new user"""
    if request.method == 'GET':
        users = User.objects.all().order_by('username')
        role = request.query_params.get('role', None)
        if role:
            users = users.filter(role=role)
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)
    else:
        serializer = UserCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            create_audit_log(request=request, action='create', model_name='User', object_id=user.id, object_name=user.username)
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_detail(request, pk):
    """Retrieve, update or delete a user"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = UserSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request=request, action='update', model_name='User', object_id=user.id,
                             object_name=user.username, changes={'fields': sorted(request.data.keys())})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user == request.user:
            return Response({'detail': 'You cannot delete your own account.'}, status=status.HTTP_400_BAD_REQUEST)
        user_id = user.id
        try:
            user.delete()
        except ProtectedError:
            return Response(
                {'detail': "This user's company has B2B orders. Deactivate the account instead."},
                status=status.HTTP_400_BAD_REQUEST
            )
        create_audit_log(request=request, action='delete', model_name='User', object_id=user_id, object_name=user.username)
        return Response(status=status.HTTP_204_NO_CONTENT)


# Company profile views
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def company_list(request):
    """List company profiles, newest first"""
    queryset = CompanyProfile.objects.select_related('user').all()

    status_filter = request.query_params.get('status', None)
    if status_filter:
        queryset = queryset.filter(status=status_filter)
    search = request.query_params.get('search', None)
    if search:
        queryset = queryset.filter(
            Q(company_name__icontains=search) |
            Q(business_number__icontains=search) |
            Q(username__icontains=search)
        )

    serializer = CompanyProfileSerializer(queryset.order_by('-created_at'), many=True)
    return Response(serializer.data)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminRole])
def company_detail(request, pk):
    """Retrieve or update a company profile"""
    profile = get_object_or_404(CompanyProfile, pk=pk)
    if request.method == 'GET':
        return Response(CompanyProfileSerializer(profile).data)

    serializer = CompanyProfileSerializer(profile, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


def _review_company(request, pk, new_status, action):
    profile = get_object_or_404(CompanyProfile, pk=pk)
    previous = profile.status
    profile.status = new_status
    profile.reviewed_at = timezone.now()
    profile.reviewed_by = request.user
    profile.save(update_fields=['status', 'reviewed_at', 'reviewed_by', 'updated_at'])
    create_audit_log(
        request=request,
        action=action,
        model_name='CompanyProfile',
        object_id=profile.id,
        object_name=profile.company_name,
        object_reference=profile.business_number,
        changes={'status': {'old': previous, 'new': new_status}},
    )
    logger.info(f"Company {profile.company_name} {new_status} by {request.user.username}")
    return Response(CompanyProfileSerializer(profile).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def company_approve(request, pk):
    return _review_company(request, pk, 'approved', 'company_approve')


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def company_reject(request, pk):
    return _review_company(request, pk, 'rejected', 'company_reject')


# Setting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def setting_list_create(request):
    """List all settings or create a new setting (admin only)"""
    if request.method == 'GET':
        settings = Setting.objects.all().order_by('key')
        serializer = SettingSerializer(settings, many=True)
        return Response(serializer.data)
    if not IsAdminRole().has_permission(request, None):
        return Response({'detail': 'Only administrators can change settings.'}, status=status.HTTP_403_FORBIDDEN)
    serializer = SettingSerializer(data=request.data)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def setting_detail(request, pk):
    """Retrieve, update or delete a setting"""
    setting = get_object_or_404(Setting, pk=pk)

    if request.method == 'GET':
        serializer = SettingSerializer(setting)
        return Response(serializer.data)
    if not IsAdminRole().has_permission(request, None):
        return Response({'detail': 'Only administrators can change settings.'}, status=status.HTTP_403_FORBIDDEN)
    if request.method in ('PUT', 'PATCH'):
        serializer = SettingSerializer(setting, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        setting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def company_info(request):
    """Company details used on printed documents"""
    if request.method == 'PUT':
        if not IsAdminRole().has_permission(request, None):
            return Response({'detail': 'Only administrators can change company info.'}, status=status.HTTP_403_FORBIDDEN)
        for field in ('name', 'business_number', 'phone', 'fax', 'address', 'ceo'):
            if field in request.data:
                Setting.objects.update_or_create(
                    key=f'company_{field}',
                    defaults={'value': str(request.data[field]).strip()},
                )
    return Response(get_company_info())


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def dashboard_settings(request):
    """Get or upsert the current user's dashboard settings"""
    settings_obj = DashboardSettings.objects.filter(user=request.user).first()

    if request.method == 'GET':
        if settings_obj is None:
            return Response({
                'widget_visibility': DashboardSettings.default_visibility(),
                'widget_sizes': {},
                'theme_color': 'default',
                'updated_at': None,
            })
        return Response(DashboardSettingsSerializer(settings_obj).data)

    serializer = DashboardSettingsSerializer(settings_obj, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save(user=request.user)
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering and pagination"""
    queryset = AuditLog.objects.select_related('user').all()

    # Non-admins only see their own activity
    if not IsAdminRole().has_permission(request, None):
        queryset = queryset.filter(user=request.user)

    user_filter = request.query_params.get('user', None)
    if user_filter:
        queryset = queryset.filter(user_id=user_filter)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model_name', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    search = request.query_params.get('search', None)
    if search:
        queryset = queryset.filter(
            Q(object_name__icontains=search) |
            Q(object_reference__icontains=search) |
            Q(user__username__icontains=search)
        )

    queryset = queryset.order_by('-created_at')

    return paginated_response(request, queryset, AuditLogSerializer)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not IsAdminRole().has_permission(request, None) and audit_log.user != request.user:
        return Response({'detail': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)
