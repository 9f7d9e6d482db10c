"""
Django Admin configuration for the converter app.
"""

from datetime import datetime, timezone

from django.contrib import admin
from django.utils.html import format_html

from apps.converter.infrastructure.persistence.models import (
    Currency,
    Provider,
    RateSnapshotRecord,
    SnapshotRate,
    TrackedCurrencySelection,
)


@admin.register(Currency)
class CurrencyAdmin(admin.ModelAdmin):
    """Admin interface for the currency catalog."""

    list_display = ('code', 'name', 'symbol', 'position', 'created_at')
    search_fields = ('code', 'name')
    readonly_fields = ('id', 'created_at', 'updated_at')
    ordering = ('position', 'code')

    fieldsets = (
        ('Currency Information', {
            'fields': ('code', 'name', 'symbol', 'position')
        }),
        ('Metadata', {
            'fields': ('id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(TrackedCurrencySelection)
class TrackedCurrencySelectionAdmin(admin.ModelAdmin):

    list_display = ('currency', 'position')
    ordering = ('position',)
    readonly_fields = ('id', 'created_at', 'updated_at')


class SnapshotRateInline(admin.TabularInline):
    model = SnapshotRate
    fields = ('currency_code', 'rate_value')
    readonly_fields = ('currency_code', 'rate_value')
    extra = 0
    can_delete = False


@admin.register(RateSnapshotRecord)
class RateSnapshotRecordAdmin(admin.ModelAdmin):
    """Read-only view of the stored rate snapshot."""

    list_display = ('base_currency', 'get_fetched_at', 'get_rates_count')
    readonly_fields = ('id', 'base_currency', 'fetched_at_epoch_millis', 'created_at', 'updated_at')
    inlines = [SnapshotRateInline]

    def has_add_permission(self, request):
        return False

    def get_fetched_at(self, obj):
        return datetime.fromtimestamp(obj.fetched_at_epoch_millis / 1000, tz=timezone.utc)
    get_fetched_at.short_description = 'Fetched at'

    def get_rates_count(self, obj):
        return obj.rates.count()
    get_rates_count.short_description = 'Rates'


@admin.register(Provider)
class ProviderAdmin(admin.ModelAdmin):
    """Rate providers; the active ones form the fallback chain in priority order."""

    list_display = ('name', 'priority', 'chain_status', 'updated_at')
    list_editable = ('priority',)
    list_filter = ('is_active',)
    readonly_fields = ('id', 'created_at', 'updated_at')
    ordering = ('priority',)
    actions = ['enable_in_chain', 'disable_in_chain']

    fieldsets = (
        (None, {
            'fields': ('name', 'priority', 'is_active')
        }),
        ('Metadata', {
            'fields': ('id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    @admin.display(description='Chain')
    def chain_status(self, obj):
        if obj.is_active:
            return format_html('<span style="color: {};">{}</span>', 'green', 'in chain')
        return format_html('<span style="color: {};">{}</span>', 'grey', 'skipped')

    @admin.action(description='Enable selected providers in the fallback chain')
    def enable_in_chain(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f'{updated} provider(s) enabled.')

    @admin.action(description='Remove selected providers from the fallback chain')
    def disable_in_chain(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f'{updated} provider(s) disabled.')
