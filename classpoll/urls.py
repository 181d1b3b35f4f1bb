from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("classpoll.interfaces.http.urls")),
] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

handler400 = "classpoll.interfaces.http.views.bad_request_view"
handler404 = "classpoll.interfaces.http.views.not_found_view"
