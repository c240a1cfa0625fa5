from django.contrib import admin

from .models import Address


@admin.register(Address)
class AddressAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "first_name", "last_name", "city", "country_code", "created_at")
    list_filter = ("country_code",)
    search_fields = ("user__username", "user__email", "city", "pin_code")
    list_select_related = ("user",)
    readonly_fields = ("created_at", "updated_at")
