import pytest

from apps.notifications.models import Notification, NotificationHistory
from apps.notifications.taxonomy import NotificationStatus
from apps.push.models import PushSubscription


def _notification(**overrides):
    values = {"type": "order_claim_error", "severity": "critical", "title": "Order Claim Failed"}
    values.update(overrides)
    return Notification.objects.create(**values)


@pytest.mark.django_db
class TestAdminPages:
    def test_dashboard_loads(self, admin_client):
        response = admin_client.get("/admin/")
        assert response.status_code == 200
        assert "notification_stats" in response.context
        assert "push_stats" in response.context

    def test_notification_list_loads(self, admin_client):
        _notification()
        response = admin_client.get("/admin/notifications/notification/")
        assert response.status_code == 200

    def test_notification_change_page_loads(self, admin_client):
        notification = _notification(error_details='{"error": {"message": "boom"}}')
        response = admin_client.get(f"/admin/notifications/notification/{notification.pk}/change/")
        assert response.status_code == 200

    def test_push_subscription_list_loads(self, admin_client, admin_user):
        PushSubscription.objects.create(
            user=admin_user, endpoint="https://push.example.com/1", p256dh="k", auth="a"
        )
        response = admin_client.get("/admin/push/pushsubscription/")
        assert response.status_code == 200


@pytest.mark.django_db
class TestNotificationActions:
    def test_resolve_button(self, admin_client):
        notification = _notification()
        response = admin_client.post(
            f"/admin/notifications/notification/{notification.pk}/actions/resolve_notification/"
        )
        assert response.status_code == 302
        notification.refresh_from_db()
        assert notification.status == NotificationStatus.RESOLVED
        assert notification.resolution_notes
        assert notification.resolved_by == "admin"
        assert NotificationHistory.objects.filter(notification=notification, event="resolved").exists()

    def test_dismiss_button_on_terminal_is_rejected(self, admin_client):
        notification = _notification(status=NotificationStatus.RESOLVED)
        response = admin_client.post(
            f"/admin/notifications/notification/{notification.pk}/actions/dismiss_notification/"
        )
        assert response.status_code == 302
        notification.refresh_from_db()
        assert notification.status == NotificationStatus.RESOLVED

    def test_dismiss_selected(self, admin_client):
        pending = _notification()
        resolved = _notification(status=NotificationStatus.RESOLVED)
        response = admin_client.post(
            "/admin/notifications/notification/",
            {"action": "dismiss_selected", "_selected_action": [pending.pk, resolved.pk]},
        )
        assert response.status_code == 302
        pending.refresh_from_db()
        resolved.refresh_from_db()
        assert pending.status == NotificationStatus.DISMISSED
        assert pending.dismiss_reason == "Dismissed by admin"
        assert resolved.status == NotificationStatus.RESOLVED


@pytest.mark.django_db
class TestNotificationChangeForm:
    def _change_url(self, notification):
        return f"/admin/notifications/notification/{notification.pk}/change/"

    def test_classification_and_outcome_are_read_only(self, admin_client):
        notification = _notification(status=NotificationStatus.RESOLVED, resolution_notes="fixed")
        response = admin_client.get(self._change_url(notification))
        editable = set(response.context["adminform"].form.fields)
        assert editable.isdisjoint({"type", "severity", "status", "resolution_notes", "dismiss_reason"})
        assert "title" in editable

    def test_post_cannot_change_severity_or_status(self, admin_client):
        notification = _notification(status=NotificationStatus.RESOLVED, resolution_notes="fixed")
        response = admin_client.post(
            self._change_url(notification),
            {
                "title": "Order Claim Failed - Order 7",
                "message": "",
                "type": "other_error",
                "severity": "low",
                "status": NotificationStatus.PENDING,
                "resolution_notes": "",
                "order_id": "7",
                "vendor_id": "",
                "vendor_name": "",
                "metadata": "{}",
                "history-TOTAL_FORMS": "0",
                "history-INITIAL_FORMS": "0",
                "history-MIN_NUM_FORMS": "0",
                "history-MAX_NUM_FORMS": "1000",
            },
        )
        assert response.status_code == 302
        notification.refresh_from_db()
        assert notification.title == "Order Claim Failed - Order 7"
        assert notification.type == "order_claim_error"
        assert notification.severity == "critical"
        assert notification.status == NotificationStatus.RESOLVED
        assert notification.resolution_notes == "fixed"

    def test_add_form_keeps_classification_fields(self, admin_client):
        response = admin_client.get("/admin/notifications/notification/add/")
        assert {"type", "severity", "status"} <= set(response.context["adminform"].form.fields)
