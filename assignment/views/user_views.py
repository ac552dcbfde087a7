import logging

from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..errors import AssignmentError
from ..services import UserService
from ..serializers import UserSerializer, PullRequestShortSerializer, SetIsActiveSerializer
from .responses import domain_error_response, server_error_response, validation_error_response

logger = logging.getLogger(__name__)


@api_view(['POST'])
def user_set_active(request):
    """POST /users/setIsActive - Установить флаг активности пользователя"""
    payload = SetIsActiveSerializer(data=request.data)
    if not payload.is_valid():
        return validation_error_response(payload.errors)

    user_id = payload.validated_data['user_id']
    try:
        user = UserService.set_user_active_status(user_id, payload.validated_data['is_active'])
        serializer = UserSerializer(user)

        return Response({
            'user': serializer.data
        })

    except AssignmentError as e:
        return domain_error_response(e)
    except Exception:
        logger.exception("failed to set user active user_id=%s", user_id)
        return server_error_response()


@api_view(['GET'])
def users_get_review(request):
    """GET /users/getReview - Получить PR'ы, где пользователь назначен ревьювером"""
    user_id = request.query_params.get('user_id')

    if not user_id:
        return validation_error_response('user_id parameter is required')

    try:
        assigned_prs = UserService.get_user_review_assignments(user_id)
        serializer = PullRequestShortSerializer(assigned_prs, many=True)

        return Response({
            'user_id': user_id,
            'pull_requests': serializer.data
        })

    except AssignmentError as e:
        return domain_error_response(e)
    except Exception:
        logger.exception("failed to get user reviews user_id=%s", user_id)
        return server_error_response()
