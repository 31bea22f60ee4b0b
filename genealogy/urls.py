from django.urls import path
from . import views

app_name = 'genealogy'

urlpatterns = [
    path('', views.home, name='home'),

    # Persons
    path('personnes/', views.person_list, name='person_list'),
    path('personnes/new/', views.person_create, name='person_create'),
    path('personnes/<int:person_id>/', views.person_detail, name='person_detail'),
    path('personnes/<int:person_id>/edit/', views.person_edit, name='person_edit'),
    path('personnes/<int:person_id>/delete/', views.person_delete, name='person_delete'),

    # Families
    path('familles/', views.family_list, name='family_list'),
    path('familles/<int:family_id>/', views.family_detail, name='family_detail'),

    # Administration
    path('administration/', views.admin_dashboard, name='admin_dashboard'),
    path('administration/utilisateurs/', views.manage_users, name='manage_users'),
    path('administration/utilisateurs/new/', views.create_user, name='create_user'),
    path('administration/utilisateurs/<int:user_id>/edit/', views.edit_user, name='edit_user'),
    path('administration/utilisateurs/<int:user_id>/delete/', views.delete_user, name='delete_user'),
]
