"""
Views for the Core app.

Public reference data and service health.
"""
from rest_framework.views import APIView
from rest_framework.permissions import AllowAny

from core.models import FieldOffice
from core.responses import success_response
from core.serializers import FieldOfficeSerializer


class FieldOfficeListView(APIView):
    """
    List field offices for registration forms.

    GET /api/v1/field-offices/

    No authentication required.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request):
        serializer = FieldOfficeSerializer(FieldOffice.objects.all(), many=True)
        return success_response(serializer.data)
