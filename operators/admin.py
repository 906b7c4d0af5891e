from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from .models import UserProfile


class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False
    verbose_name_plural = 'Perfil'


class UserAdmin(BaseUserAdmin):
    inlines = (UserProfileInline,)
    list_display = BaseUserAdmin.list_display + ('role',)

    def role(self, obj):
        return obj.userprofile.get_role_display() if hasattr(obj, 'userprofile') else '-'
    role.short_description = "Rol"


admin.site.unregister(User)
admin.site.register(User, UserAdmin)
