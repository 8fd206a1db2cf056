"""Admin configuration for push subscriptions."""

from django.contrib import admin

from apps.push.models import PushSubscription


@admin.register(PushSubscription)
class PushSubscriptionAdmin(admin.ModelAdmin):
    list_display = ["user", "enabled", "short_endpoint", "user_agent", "updated_at"]
    list_filter = ["enabled"]
    search_fields = ["user__username", "endpoint", "user_agent"]
    readonly_fields = ["endpoint", "p256dh", "auth", "user_agent", "created_at", "updated_at"]
    actions = ["disable_selected"]

    @admin.action(description="Disable selected subscriptions")
    def disable_selected(self, request, queryset):
        updated = queryset.update(enabled=False)
        self.message_user(request, f"{updated} subscription(s) disabled.")

    @admin.display(description="Endpoint")
    def short_endpoint(self, obj):
        return obj.endpoint if len(obj.endpoint) <= 60 else f"{obj.endpoint[:57]}..."
