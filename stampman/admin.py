"""Stampman admin.

Stamp counters are read-only here: grants and claims must go through
StampCardService so the version check and the ledger are kept.
"""

from django.contrib import admin
from django.utils.html import format_html

from stampman.models import CustomerCard, LoyaltyProgram, StampActivity


# ===========================================
# LoyaltyProgram Admin
# ===========================================


@admin.register(LoyaltyProgram)
class LoyaltyProgramAdmin(admin.ModelAdmin):
    list_display = [
        "code",
        "name",
        "business_ref",
        "total_slots",
        "is_active",
        "card_count",
    ]
    list_filter = ["is_active"]
    search_fields = ["code", "name", "business_ref"]
    readonly_fields = ["created_at", "updated_at"]

    def card_count(self, obj):
        return obj.cards.count()

    card_count.short_description = "Cartelas"


# ===========================================
# CustomerCard Admin
# ===========================================


class StampActivityInline(admin.TabularInline):
    model = StampActivity
    extra = 0
    readonly_fields = ["kind", "count", "stamps_after", "commit_id", "note", "created_by", "created_at"]
    ordering = ["-created_at"]

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CustomerCard)
class CustomerCardAdmin(admin.ModelAdmin):
    list_display = [
        "card_code",
        "customer_ref",
        "program",
        "stamps_progress",
        "state_badge",
        "created_at",
    ]
    list_filter = ["is_reward_claimed", "program"]
    search_fields = ["card_code", "customer_ref", "customer_name"]
    raw_id_fields = ["program"]
    readonly_fields = [
        "business_ref",
        "total_slots",
        "current_stamps",
        "is_reward_claimed",
        "last_commit_id",
        "version",
        "created_at",
        "last_stamp_at",
        "reward_claimed_at",
    ]
    inlines = [StampActivityInline]

    def stamps_progress(self, obj):
        return f"{obj.current_stamps}/{obj.total_slots}"

    stamps_progress.short_description = "Carimbos"

    def state_badge(self, obj):
        state = obj.as_progress().state
        colors = {
            "in_progress": "#6c757d",
            "ready_to_redeem": "#28a745",
            "redeemed": "#007bff",
        }
        return format_html(
            '<span style="background:{}; color:#fff; padding:2px 8px; '
            'border-radius:3px; font-size:11px;">{}</span>',
            colors[state.value],
            state.value,
        )

    state_badge.short_description = "Estado"


@admin.register(StampActivity)
class StampActivityAdmin(admin.ModelAdmin):
    list_display = ["created_at", "card", "kind", "count", "stamps_after", "created_by"]
    list_filter = ["kind"]
    search_fields = ["card__card_code", "card__customer_ref", "commit_id", "note"]
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
