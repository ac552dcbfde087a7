import logging

from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from ..errors import AssignmentError
from ..services import TeamService
from ..serializers import TeamSerializer, TeamAddSerializer
from .responses import domain_error_response, server_error_response, validation_error_response

logger = logging.getLogger(__name__)


@api_view(['POST'])
def team_add(request):
    """POST /team/add - Создать команду с участниками"""
    payload = TeamAddSerializer(data=request.data)
    if not payload.is_valid():
        return validation_error_response(payload.errors)

    team_name = payload.validated_data['team_name']
    try:
        TeamService.create_team_with_members(team_name, payload.validated_data['members'])
        team = TeamService.get_team_with_members(team_name)
        serializer = TeamSerializer(team)

        return Response({
            'team': serializer.data
        }, status=status.HTTP_201_CREATED)

    except AssignmentError as e:
        return domain_error_response(e)
    except Exception:
        logger.exception("failed to create team team_name=%s", team_name)
        return server_error_response()


@api_view(['GET'])
def team_get(request):
    """GET /team/get - Получить команду с участниками"""
    team_name = request.query_params.get('team_name')

    if not team_name:
        return validation_error_response('team_name parameter is required')

    try:
        team = TeamService.get_team_with_members(team_name)
        serializer = TeamSerializer(team)

        return Response(serializer.data)

    except AssignmentError as e:
        return domain_error_response(e)
    except Exception:
        logger.exception("failed to get team team_name=%s", team_name)
        return server_error_response()
