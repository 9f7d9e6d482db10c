"""
Serializers for the converter API.
Handles validation and transformation between API, DTO and ORM layers.
"""

from rest_framework import serializers

from apps.converter.domain.calculator import DIGITS, OPERATOR_KEYS
from apps.converter.infrastructure.persistence.models import Currency, Provider

KEYPAD_SYMBOLS = set(DIGITS) | set(OPERATOR_KEYS) | {".", "%", "=", "C", "c", "<", " "}


def amount_field(**kwargs):
    # No quantization: amounts keep the scale the domain produced
    return serializers.DecimalField(max_digits=None, decimal_places=None, **kwargs)


class CurrencySerializer(serializers.ModelSerializer):
    is_tracked = serializers.SerializerMethodField()

    class Meta:
        model = Currency
        fields = ["code", "name", "symbol", "position", "is_tracked"]

    def get_is_tracked(self, obj) -> bool:
        return obj.code in self.context.get("tracked_codes", set())


class TrackedCurrencySerializer(serializers.Serializer):
    code = serializers.CharField()
    name = serializers.CharField()
    symbol = serializers.CharField()
    amount = amount_field()
    is_active = serializers.BooleanField()


class TrackedCurrencyCreateSerializer(serializers.Serializer):
    code = serializers.CharField(min_length=3, max_length=3)

    def validate_code(self, value: str) -> str:
        return value.upper()


class RateSnapshotSerializer(serializers.Serializer):
    base_currency = serializers.CharField()
    rates = serializers.DictField(child=amount_field())
    fetched_at = serializers.DateTimeField()
    is_stale = serializers.BooleanField()


class ConversionResultSerializer(serializers.Serializer):
    source_currency = serializers.CharField()
    exchanged_currency = serializers.CharField()
    amount = amount_field()
    rate = amount_field()
    converted_amount = amount_field()
    rates_fetched_at = serializers.DateTimeField(allow_null=True)


class RateRefreshRequestSerializer(serializers.Serializer):
    base_currency = serializers.CharField(min_length=3, max_length=3, required=False)
    run_async = serializers.BooleanField(required=False, default=False)

    def validate_base_currency(self, value: str) -> str:
        return value.upper()


class SessionEvaluateSerializer(serializers.Serializer):
    keys = serializers.CharField(max_length=256, allow_blank=True, trim_whitespace=False)
    active_currency = serializers.CharField(min_length=3, max_length=3, required=False)
    amount = amount_field(required=False)

    def validate_keys(self, value: str) -> str:
        unknown = sorted(set(value) - KEYPAD_SYMBOLS)
        if unknown:
            raise serializers.ValidationError(f"Unknown calculator keys: {''.join(unknown)}")
        return value

    def validate_active_currency(self, value: str) -> str:
        return value.upper()


class SessionResultSerializer(serializers.Serializer):
    value = amount_field()
    display = serializers.CharField()
    active_currency = serializers.CharField(allow_null=True)
    tracked = TrackedCurrencySerializer(many=True)


class ProviderSerializer(serializers.ModelSerializer):
    name_display = serializers.CharField(
        source="get_name_display",
        read_only=True,
    )

    class Meta:
        model = Provider
        fields = ["id", "name", "name_display", "priority", "is_active", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_priority(self, value):
        instance = self.instance
        existing = Provider.objects.filter(priority=value)

        if instance:
            existing = existing.exclude(pk=instance.pk)

        if existing.exists():
            existing_provider = existing.first()
            raise serializers.ValidationError(
                f"Priority {value} is already assigned to {existing_provider.get_name_display()}. "
                f"Please choose a different priority or update the existing provider first."
            )

        return value
