from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.http import JsonResponse
import structlog

from accounts.models import User

logger = structlog.get_logger()


# Skip Login step: the user is named by a header or by MOCK_AUTH_USERNAME
class MockLoginUserMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.user = AnonymousUser()
        if request.path.startswith("/api"):
            username = request.headers.get("X-User-NAME")
            if username:
                logger.info("mock_login", username=username)
                try:
                    request.user = User.objects.get(username=username)
                except User.DoesNotExist:
                    return JsonResponse(
                        {
                            "error": "unauthorized",
                            "message": "User not found or invalid credentials.",
                        },
                        status=401,
                    )
            elif settings.MOCK_AUTH_USERNAME:
                try:
                    request.user = User.objects.get(username=settings.MOCK_AUTH_USERNAME)
                except User.DoesNotExist:
                    logger.error("mock_auth_user_missing", username=settings.MOCK_AUTH_USERNAME)
                    return JsonResponse(
                        {
                            "error": "configuration_error",
                            "message": "Mock auth user is not configured",
                        },
                        status=500,
                    )
        response = self.get_response(request)
        return response
