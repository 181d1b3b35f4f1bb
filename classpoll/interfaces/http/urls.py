from django.urls import path

from classpoll.interfaces.http import views

urlpatterns = [
    # Auth
    path("auth/csrf/", views.csrf_view, name="csrf"),
    path("auth/register/", views.register_view, name="register"),
    path("auth/login/", views.login_view, name="login"),
    path("auth/logout/", views.logout_view, name="logout"),
    # Sessions (teacher)
    path("sessions/", views.sessions_view, name="sessions"),
    path(
        "sessions/normalize-orders/",
        views.normalize_orders_view,
        name="normalize_orders",
    ),
    path("sessions/<int:session_id>/", views.session_detail_view, name="session_detail"),
    path(
        "sessions/<int:session_id>/active/",
        views.session_active_view,
        name="session_active",
    ),
    path(
        "sessions/<int:session_id>/delete/",
        views.delete_session_view,
        name="delete_session",
    ),
    path(
        "sessions/<int:session_id>/clone/",
        views.clone_session_view,
        name="clone_session",
    ),
    path(
        "sessions/<int:session_id>/elements/",
        views.session_elements_view,
        name="session_elements",
    ),
    path(
        "sessions/<int:session_id>/elements/import/",
        views.import_elements_view,
        name="import_elements",
    ),
    path(
        "sessions/<int:session_id>/elements/reorder/",
        views.reorder_elements_view,
        name="reorder_elements",
    ),
    path(
        "sessions/<int:session_id>/responses/",
        views.session_responses_view,
        name="session_responses",
    ),
    path(
        "sessions/<int:session_id>/participants/<str:participant_id>/responses/delete/",
        views.delete_participant_responses_view,
        name="delete_participant_responses",
    ),
    # Elements (teacher)
    path("elements/<int:element_id>/", views.element_detail_view, name="element_detail"),
    path(
        "elements/<int:element_id>/delete/",
        views.delete_element_view,
        name="delete_element",
    ),
    path(
        "elements/<int:element_id>/duplicate/",
        views.duplicate_element_view,
        name="duplicate_element",
    ),
    path("elements/<int:element_id>/move/", views.move_element_view, name="move_element"),
    path(
        "elements/<int:element_id>/active/",
        views.element_active_view,
        name="element_active",
    ),
    path(
        "elements/<int:element_id>/conditional-logic/",
        views.element_conditional_logic_view,
        name="element_conditional_logic",
    ),
    path(
        "elements/<int:element_id>/responses/",
        views.element_responses_view,
        name="element_responses",
    ),
    path(
        "responses/<int:response_id>/delete/",
        views.delete_response_view,
        name="delete_response",
    ),
    # Participants
    path("join/<str:session_code>/", views.join_session_view, name="join_session"),
    path(
        "join/<str:session_code>/elements/",
        views.participant_elements_view,
        name="participant_elements",
    ),
    path(
        "join/<str:session_code>/elements/<int:element_id>/taken-choices/",
        views.taken_choices_view,
        name="taken_choices",
    ),
    path(
        "join/<str:session_code>/responses/",
        views.participant_responses_view,
        name="participant_responses",
    ),
    path("join/<str:session_code>/results/", views.results_view, name="results"),
]
