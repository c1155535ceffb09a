from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(data=None, message='Success', status=http_status.HTTP_200_OK):
    """Wrap a payload in the ``{success, message, data}`` envelope."""
    body = {'success': True, 'message': message}
    if data is not None:
        body['data'] = data
    return Response(body, status=status)


def created_response(data=None, message='Created successfully'):
    return success_response(data, message, http_status.HTTP_201_CREATED)
