from django.http import JsonResponse
from django.db import connection
from django.utils.timezone import now

from django.contrib.admin.views.decorators import staff_member_required

from organizations.models import Organization


@staff_member_required
def health_check(request):
    status = {
        "status": "ok",
        "time": now().isoformat(),
        "db": "ok",
        "marketplace": "ok",
    }

    # --- DB check ---
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except Exception as e:
        status["status"] = "error"
        status["db"] = "error"
        status["error"] = str(e)
        return JsonResponse(status, status=500)

    # --- Marketplace check ---
    if Organization.objects.marketplace_id() is None:
        status["status"] = "degraded"
        status["marketplace"] = "missing"
        return JsonResponse(status, status=503)

    return JsonResponse(status, status=200)
