"""
ViewSets for the converter API v1.
Thin adapters: validation here, behaviour in the domain session and engine.
"""

from decimal import Decimal, InvalidOperation

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.converter.api.v1.serializers import (
    ConversionResultSerializer,
    CurrencySerializer,
    ProviderSerializer,
    RateRefreshRequestSerializer,
    RateSnapshotSerializer,
    SessionEvaluateSerializer,
    SessionResultSerializer,
    TrackedCurrencyCreateSerializer,
    TrackedCurrencySerializer,
)
from apps.converter.application.dto import (
    ConversionResultDTO,
    RateSnapshotDTO,
    SessionResultDTO,
    TrackedCurrencyDTO,
)
from apps.converter.application.services import (
    build_conversion_engine,
    build_session,
    default_base_currency,
    evaluate_keys,
)
from apps.converter.application.tasks import refresh_exchange_rates
from apps.converter.domain.exceptions import CannotRemoveLastCurrency
from apps.converter.infrastructure.persistence.models import Currency, Provider
from apps.converter.infrastructure.persistence.repositories import TrackedCurrencyRepository


def parse_amount(raw):
    """Return (amount, error_response)."""
    try:
        amount = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return None, Response(
            {"error": "Invalid amount. Must be a number"},
            status=status.HTTP_400_BAD_REQUEST
        )
    if not amount.is_finite():
        return None, Response(
            {"error": "Invalid amount. Must be a number"},
            status=status.HTTP_400_BAD_REQUEST
        )
    return amount, None


@extend_schema(tags=['Currencies'])
class CurrencyViewSet(viewsets.ReadOnlyModelViewSet):

    queryset = Currency.objects.all()
    serializer_class = CurrencySerializer
    lookup_field = "code"

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["tracked_codes"] = set(TrackedCurrencyRepository.codes())
        return context


@extend_schema(tags=['Tracked currencies'])
class TrackedCurrencyViewSet(viewsets.ViewSet):

    @extend_schema(
        parameters=[
            OpenApiParameter("active_currency", OpenApiTypes.STR, description="Tracked currency the amount is entered in (defaults to the first one)"),
            OpenApiParameter("amount", OpenApiTypes.DECIMAL, description="Amount of the active currency"),
        ],
        responses=TrackedCurrencySerializer(many=True),
        description="List tracked currencies, optionally converting an amount of the active one into all others"
    )
    def list(self, request):
        session = build_session(active_code=request.query_params.get('active_currency'))

        amount_str = request.query_params.get('amount')
        if amount_str is not None:
            amount, error = parse_amount(amount_str)
            if error:
                return error
            session.calculator.set_display(amount)

        data = [TrackedCurrencyDTO.from_domain(t) for t in session.tracked]
        return Response(TrackedCurrencySerializer(data, many=True).data)

    @extend_schema(request=TrackedCurrencyCreateSerializer, responses=TrackedCurrencySerializer(many=True))
    def create(self, request):
        serializer = TrackedCurrencyCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        code = serializer.validated_data["code"]

        if not TrackedCurrencyRepository.add(code):
            return Response(
                {"error": f"Currency {code} not found"},
                status=status.HTTP_404_NOT_FOUND
            )

        session = build_session()
        data = [TrackedCurrencyDTO.from_domain(t) for t in session.tracked]
        return Response(TrackedCurrencySerializer(data, many=True).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        parameters=[OpenApiParameter("id", OpenApiTypes.STR, OpenApiParameter.PATH, description="Currency code")],
        responses={204: None},
    )
    def destroy(self, request, pk=None):
        code = (pk or "").upper()
        session = build_session()

        if code not in session.amounts():
            return Response(
                {"error": f"Currency {code} is not tracked"},
                status=status.HTTP_404_NOT_FOUND
            )

        try:
            session.remove_tracked(code)
        except CannotRemoveLastCurrency as e:
            return Response({"error": str(e)}, status=status.HTTP_409_CONFLICT)

        TrackedCurrencyRepository.remove(code)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(tags=['Rates'])
class RateViewSet(viewsets.ViewSet):

    @extend_schema(responses=RateSnapshotSerializer, description="Current rate snapshot (live or last persisted)")
    @action(detail=False, methods=['get'], url_path='latest')
    def latest(self, request):
        engine = build_conversion_engine()
        snapshot = engine.snapshot
        if snapshot is None:
            return Response(
                {"error": "No exchange rates available yet"},
                status=status.HTTP_404_NOT_FOUND
            )

        dto = RateSnapshotDTO.from_domain(snapshot, is_stale=engine.needs_refresh())
        return Response(RateSnapshotSerializer(dto).data)

    @extend_schema(
        parameters=[
            OpenApiParameter("source_currency", OpenApiTypes.STR, required=True, description="Source currency code (e.g. EUR)"),
            OpenApiParameter("exchanged_currency", OpenApiTypes.STR, required=True, description="Target currency code (e.g. USD)"),
            OpenApiParameter("amount", OpenApiTypes.DECIMAL, required=True, description="Amount to convert"),
        ],
        responses=ConversionResultSerializer,
        description="Convert an amount with the current snapshot. Unknown codes convert at 1:1."
    )
    @action(detail=False, methods=['get'], url_path='convert')
    def convert(self, request):
        source_currency_code = request.query_params.get('source_currency')
        exchanged_currency_code = request.query_params.get('exchanged_currency')
        amount_str = request.query_params.get('amount')

        # Validation
        if not all([source_currency_code, exchanged_currency_code, amount_str]):
            return Response(
                {"error": "source_currency, exchanged_currency, and amount are required"},
                status=status.HTTP_400_BAD_REQUEST
            )

        amount, error = parse_amount(amount_str)
        if error:
            return error

        source = source_currency_code.upper()
        target = exchanged_currency_code.upper()

        engine = build_conversion_engine()
        snapshot = engine.snapshot
        dto = ConversionResultDTO(
            source_currency=source,
            exchanged_currency=target,
            amount=amount,
            rate=engine.rate(source, target),
            converted_amount=engine.convert(amount, source, target),
            rates_fetched_at=RateSnapshotDTO.from_domain(snapshot).fetched_at if snapshot else None,
        )
        return Response(ConversionResultSerializer(dto).data)

    @extend_schema(
        request=RateRefreshRequestSerializer,
        responses={200: RateSnapshotSerializer, 202: None, 502: None},
        description="Fetch fresh rates now, or dispatch the refresh task when run_async is set"
    )
    @action(detail=False, methods=['post'], url_path='refresh')
    def refresh(self, request):
        serializer = RateRefreshRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        base_currency = serializer.validated_data.get("base_currency") or default_base_currency()

        if serializer.validated_data["run_async"]:
            task = refresh_exchange_rates.delay(base_currency)
            return Response({"task_id": task.id}, status=status.HTTP_202_ACCEPTED)

        engine = build_conversion_engine()
        result = engine.refresh(base_currency)
        if not result.ok:
            fallback = engine.snapshot
            return Response(
                {
                    "error": str(result.error),
                    "fallback": RateSnapshotSerializer(
                        RateSnapshotDTO.from_domain(fallback, is_stale=True)
                    ).data if fallback else None,
                },
                status=status.HTTP_502_BAD_GATEWAY
            )

        return Response(RateSnapshotSerializer(RateSnapshotDTO.from_domain(result.snapshot)).data)


@extend_schema(tags=['Session'])
class SessionViewSet(viewsets.ViewSet):

    @extend_schema(
        request=SessionEvaluateSerializer,
        responses=SessionResultSerializer,
        description=(
            "Run calculator keys against the tracked currencies. "
            "Keys: 0-9 . + - * / % = C (clear) < (backspace). "
            "An optional amount is loaded into the calculator first."
        )
    )
    @action(detail=False, methods=['post'], url_path='evaluate')
    def evaluate(self, request):
        serializer = SessionEvaluateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        active_code = serializer.validated_data.get("active_currency")

        session = build_session(active_code=active_code)
        if active_code and (session.active is None or session.active.code != active_code):
            return Response(
                {"error": f"Currency {active_code} is not tracked"},
                status=status.HTTP_400_BAD_REQUEST
            )

        if "amount" in serializer.validated_data:
            # load does not emit, so the tracked amounts are derived here
            session.calculator.load(serializer.validated_data["amount"])
            session.update_amount(session.calculator.value)

        value = evaluate_keys(session, serializer.validated_data["keys"])
        return Response(SessionResultSerializer(SessionResultDTO.from_session(session, value)).data)


@extend_schema(tags=['Providers'])
class ProviderViewSet(viewsets.ModelViewSet):

    queryset = Provider.objects.all()
    serializer_class = ProviderSerializer
