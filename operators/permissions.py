from django.contrib.auth.models import User
from django.core.exceptions import PermissionDenied

from .models import UserProfile


WRITE_ROLES = (UserProfile.ASSISTANT, UserProfile.SUPERVISOR, UserProfile.ADMIN)
SUPERVISOR_ROLES = (UserProfile.SUPERVISOR, UserProfile.ADMIN)


def has_role(actor_role, required_roles):
    """Capability check: True when ``actor_role`` is one of ``required_roles``"""
    if not actor_role:
        return False
    return actor_role in required_roles


def get_role(user):
    """Return the role string of ``user`` or None when it has no profile"""
    if user is None or not user.is_authenticated:
        return None
    try:
        return user.userprofile.role
    except UserProfile.DoesNotExist:
        return None


def ensure_role(user, required_roles):
    """Raise PermissionDenied unless ``user`` holds one of ``required_roles``"""
    if get_role(user) is None:
        raise PermissionDenied("Usuario sin perfil asignado")

    if not has_role(get_role(user), required_roles):
        raise PermissionDenied(
            "Acceso restringido a: " + ", ".join(required_roles)
        )


def notification_recipients(roles=SUPERVISOR_ROLES):
    """Active users holding ``roles`` that have an e-mail address"""
    return User.objects.filter(
        is_active=True,
        userprofile__role__in=roles,
    ).exclude(email='').order_by('id')
