"""Test configuration: a minimal Django setup for the console app."""

from __future__ import annotations

import django
from django.conf import settings


def pytest_configure():
    if settings.configured:
        return
    settings.configure(
        INSTALLED_APPS=["console"],
        TEMPLATES=[
            {
                "BACKEND": "django.template.backends.django.DjangoTemplates",
                "APP_DIRS": True,
            }
        ],
        MARKDOWN_RENDERER={"INTERNAL_HOSTS": ["console.example.com"]},
    )
    django.setup()
