"""Custom Django admin app configuration."""

from django.contrib.admin.apps import AdminConfig


class OpsAdminConfig(AdminConfig):
    default_site = "config.admin.OpsAdminSite"
