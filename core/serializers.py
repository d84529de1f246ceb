from rest_framework import serializers

from core.models import FieldOffice


class FieldOfficeSerializer(serializers.ModelSerializer):
    class Meta:
        model = FieldOffice
        fields = ['id', 'code', 'name']
