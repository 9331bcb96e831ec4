from django.http import JsonResponse
from django.views.decorators.http import require_GET


@require_GET
def health_view(request):
    return JsonResponse({"status": "OK", "message": "Server is running"})


def error_404_view(request, exception):
    # API clients get JSON instead of the default HTML page
    return JsonResponse({"success": False, "message": "Not found"}, status=404)


def error_500_view(request):
    return JsonResponse({"success": False, "message": "Server error"}, status=500)
