from django.contrib import admin

from checkout.models import CheckoutAttempt, ReconciliationConflict, SessionSnapshot, TerminalOutcome


@admin.register(CheckoutAttempt)
class CheckoutAttemptAdmin(admin.ModelAdmin):
    list_display = ["transaction_id", "customer_email", "purchase_type", "created_at"]
    search_fields = ["transaction_id", "customer_email"]
    list_filter = ["purchase_type"]


@admin.register(SessionSnapshot)
class SessionSnapshotAdmin(admin.ModelAdmin):
    list_display = ["transaction_id", "status", "observed_at"]
    search_fields = ["transaction_id"]
    list_filter = ["status"]


@admin.register(TerminalOutcome)
class TerminalOutcomeAdmin(admin.ModelAdmin):
    list_display = ["transaction_id", "status", "recorded_at"]
    search_fields = ["transaction_id"]


@admin.register(ReconciliationConflict)
class ReconciliationConflictAdmin(admin.ModelAdmin):
    list_display = ["transaction_id", "recorded_status", "observed_status", "observed_at", "reviewed"]
    list_filter = ["reviewed"]
    list_editable = ["reviewed"]
