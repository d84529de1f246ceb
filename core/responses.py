"""Response envelope helpers shared by all API views."""

from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(data=None, message=None, status=http_status.HTTP_200_OK, headers=None):
    body = {'success': True, 'data': data}
    if message:
        body['message'] = message
    return Response(body, status=status, headers=headers)


def failure_response(message, code, status):
    return Response(
        {'success': False, 'error': {'code': code, 'message': message}},
        status=status,
    )
