"""
Root URL configuration.

Health probes are plain Django views so load balancers can call them without
a token. The deep check also reports when the reminder sweep last ran.
"""
import time

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.core.cache import cache
from django.db import connection
from django.http import JsonResponse
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView

SWEEP_TASK_NAME = "offboarding.reminder_sweep"


def _database_status():
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except Exception as exc:
        return {"status": "down", "error": str(exc)}
    return {"status": "up", "engine": connection.vendor}


def _cache_status():
    try:
        cache.set("_health_probe", "1", timeout=5)
        if cache.get("_health_probe") != "1":
            return {"status": "degraded", "error": "read-back failed"}
    except Exception as exc:
        return {"status": "down", "error": str(exc)}
    return {"status": "up"}


def _reminder_sweep_status():
    """Last stored result of the reminder sweep task (django-celery-results)."""
    from django_celery_results.models import TaskResult

    try:
        last = (
            TaskResult.objects.filter(task_name=SWEEP_TASK_NAME)
            .order_by("-date_done")
            .values("status", "date_done")
            .first()
        )
    except Exception as exc:
        return {"status": "unknown", "error": str(exc)}
    if last is None:
        return {"status": "ok", "last_run": None}
    return {
        "status": "ok" if last["status"] != "FAILURE" else "failing",
        "last_run": last["date_done"].isoformat() if last["date_done"] else None,
        "last_state": last["status"],
    }


def health_check(request):
    """Liveness probe: 200 while the process is serving."""
    return JsonResponse({"status": "ok"})


def readiness_check(request):
    """Readiness probe: database and cache must both answer."""
    checks = {"db": _database_status(), "cache": _cache_status()}
    ready = all(check["status"] == "up" for check in checks.values())
    return JsonResponse(
        {"status": "ready" if ready else "not_ready", **checks},
        status=200 if ready else 503,
    )


def deep_health_check(request):
    """Component status, unapplied migrations and reminder sweep history."""
    from io import StringIO
    from django.core.management import call_command

    start = time.monotonic()
    components = {
        "database": _database_status(),
        "cache": _cache_status(),
    }

    try:
        out = StringIO()
        call_command("showmigrations", "--plan", stdout=out, no_color=True)
        pending = [line for line in out.getvalue().splitlines() if line.strip().startswith("[ ]")]
        components["migrations"] = {
            "status": "ok" if not pending else "pending",
            "pending_count": len(pending),
        }
    except Exception:
        components["migrations"] = {"status": "unknown"}

    components["reminder_sweep"] = _reminder_sweep_status()

    elapsed_ms = round((time.monotonic() - start) * 1000, 1)
    all_up = all(c.get("status") in ("up", "ok") for c in components.values())

    return JsonResponse({
        "status": "healthy" if all_up else "degraded",
        "response_time_ms": elapsed_ms,
        "components": components,
    }, status=200 if all_up else 503)


urlpatterns = [
    path("", RedirectView.as_view(url="/admin/", permanent=False)),
    path("admin/", admin.site.urls),

    # Health probes (no authentication)
    path("api/v1/health/", health_check, name="health-check"),
    path("api/v1/readiness/", readiness_check, name="readiness-check"),
    path("api/v1/health/deep/", deep_health_check, name="deep-health-check"),

    path("api/v1/auth/", include("apps.authentication.urls")),
    path("api/v1/notifications/", include("apps.notifications.urls")),
    path("api/v1/offboarding/", include("apps.offboarding.urls")),
]

if getattr(settings, "ENABLE_API_DOCS", False):
    urlpatterns += [
        path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
        path(
            "api/docs/",
            SpectacularSwaggerView.as_view(url_name="schema"),
            name="swagger-ui",
        ),
        path(
            "api/redoc/",
            SpectacularRedocView.as_view(url_name="schema"),
            name="redoc",
        ),
    ]

if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

