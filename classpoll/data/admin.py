from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from classpoll.data.models import Element, Response, Session, User


@admin.register(User)
class CustomUserAdmin(UserAdmin):  # type: ignore[type-arg]
    list_display = ("email", "display_name", "is_staff")
    search_fields = ("email", "display_name")
    ordering = ("email",)
    fieldsets = (
        *UserAdmin.fieldsets,  # type: ignore[misc]
        ("Teacher", {"fields": ("display_name",)}),
    )
    add_fieldsets = (
        *UserAdmin.add_fieldsets,  # type: ignore[misc]
        ("Teacher", {"fields": ("email", "display_name")}),
    )


class ElementInline(admin.TabularInline):  # type: ignore[type-arg]
    model = Element
    fields = ("order", "element_type", "title", "is_active")
    extra = 0


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ("title", "session_code", "teacher", "is_active", "created_at")
    list_filter = ("is_active", "results_public")
    search_fields = ("title", "session_code")
    list_select_related = ("teacher",)
    raw_id_fields = ("teacher",)
    inlines = [ElementInline]  # pyright: ignore[reportUnknownVariableType]


@admin.register(Element)
class ElementAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ("title", "session", "element_type", "order", "is_active")
    list_filter = ("element_type", "is_active")
    list_select_related = ("session",)
    raw_id_fields = ("session",)


@admin.register(Response)
class ResponseAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ("participant_id", "element", "session", "created_at")
    search_fields = ("participant_id",)
    list_select_related = ("session", "element")
    raw_id_fields = ("session", "element")
    readonly_fields = ("created_at", "updated_at")
