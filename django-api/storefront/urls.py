from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("ebooks.urls")),
    path("api/checkout/", include("checkout.urls")),
]
