import logging

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..errors import AssignmentError
from ..services import PullRequestService
from ..serializers import (
    PullRequestSerializer,
    PullRequestCreateSerializer,
    PullRequestMergeSerializer,
    PullRequestReassignSerializer,
)
from .responses import domain_error_response, server_error_response, validation_error_response

logger = logging.getLogger(__name__)


@api_view(['POST'])
def pullrequest_create(request):
    """POST /pullRequest/create - Создать PR"""
    payload = PullRequestCreateSerializer(data=request.data)
    if not payload.is_valid():
        return validation_error_response(payload.errors)

    data = payload.validated_data
    try:
        pr = PullRequestService.create_pull_request(
            data['pull_request_id'],
            data['pull_request_name'],
            data['author_id']
        )
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data
        }, status=status.HTTP_201_CREATED)

    except AssignmentError as e:
        return domain_error_response(e)
    except Exception:
        logger.exception("failed to create PR pr_id=%s", data['pull_request_id'])
        return server_error_response()


@api_view(['POST'])
def pullrequest_merge(request):
    """POST /pullRequest/merge - Пометить PR как MERGED"""
    payload = PullRequestMergeSerializer(data=request.data)
    if not payload.is_valid():
        return validation_error_response(payload.errors)

    pr_id = payload.validated_data['pull_request_id']
    try:
        pr = PullRequestService.merge_pull_request(pr_id)
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data
        })

    except AssignmentError as e:
        return domain_error_response(e)
    except Exception:
        logger.exception("failed to merge PR pr_id=%s", pr_id)
        return server_error_response()


@api_view(['POST'])
def pullrequest_reassign(request):
    """POST /pullRequest/reassign - Переназначить ревьювера"""
    payload = PullRequestReassignSerializer(data=request.data)
    if not payload.is_valid():
        return validation_error_response(payload.errors)

    pr_id = payload.validated_data['pull_request_id']
    old_user_id = payload.validated_data['old_user_id']
    try:
        pr, new_reviewer = PullRequestService.reassign_reviewer(pr_id, old_user_id)
        serializer = PullRequestSerializer(pr)

        return Response({
            'pr': serializer.data,
            'replaced_by': new_reviewer.id
        })

    except AssignmentError as e:
        return domain_error_response(e)
    except Exception:
        logger.exception("failed to reassign reviewer pr_id=%s old_reviewer=%s", pr_id, old_user_id)
        return server_error_response()
