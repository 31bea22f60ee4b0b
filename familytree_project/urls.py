from django.contrib import admin
from django.urls import path, include
from django.http import HttpResponse
from django.conf import settings


# ======================================================================
# Robots.txt view
# ======================================================================
def robots_txt(request):
    lines = [
        "User-Agent: *",
        "Disallow: /admin/",
        "Disallow: /accounts/",
        "Disallow: /administration/",
    ]
    return HttpResponse("\n".join(lines), content_type="text/plain")


urlpatterns = [
    path(f'{settings.ADMIN_URL}', admin.site.urls),

    path('', include('genealogy.urls')),

    path('accounts/', include('accounts.urls')),

    path('robots.txt', robots_txt),
    path('health/', lambda request: HttpResponse('OK', content_type='text/plain')),
]

# ======================================================================
# Custom error handlers
# ======================================================================

handler400 = 'familytree_project.views.custom_400_view'
handler403 = 'familytree_project.views.custom_403_view'
handler404 = 'familytree_project.views.custom_404_view'
handler500 = 'familytree_project.views.custom_500_view'

admin.site.site_header = "Administration - Arbre familial"
admin.site.site_title = "Arbre familial"
admin.site.index_title = "Gestion des comptes"
admin.site.site_url = "/"
