from django.contrib import admin

from .models import Account


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("user", "role", "middle_name", "is_external_auth")
    list_filter = ("role", "is_external_auth")
    search_fields = ("user__username", "user__last_name", "user__email")
