from rest_framework import serializers


class AccountDataSerializer(serializers.Serializer):
    """Serializes :class:`accounts.client.AccountData` instances."""

    user_id = serializers.IntegerField(read_only=True)
    name = serializers.CharField(read_only=True)
    surname = serializers.CharField(read_only=True)
    middle_name = serializers.CharField(read_only=True)
    email = serializers.CharField(read_only=True)
    role = serializers.CharField(read_only=True)
    is_external_auth = serializers.BooleanField(read_only=True)
