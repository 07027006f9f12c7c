"""
Staff Service

Staff lookup for the login boundary.
"""

import logging
from typing import Optional

from django.db import IntegrityError, transaction

from ..exceptions import DuplicateKey, InvalidArgument, StaffNotFound
from ..models import StaffMember
from .validation import check_id

logger = logging.getLogger(__name__)


class StaffService:
    """Service for staff members."""

    @staticmethod
    def get_staff(staff_id: int) -> StaffMember:
        staff_id = check_id(staff_id, 'staff id')
        try:
            return StaffMember.objects.get(pk=staff_id)
        except StaffMember.DoesNotExist:
            raise StaffNotFound(f"Staff member {staff_id} not found")

    @staticmethod
    def find_by_username(username: str) -> Optional[StaffMember]:
        if not username:
            return None
        return StaffMember.objects.filter(username__iexact=username.strip()).first()

    @staticmethod
    def find_staff_by_credentials(username: str, password: str) -> Optional[StaffMember]:
        """Return the active staff member owning these credentials, or None."""
        staff = StaffService.find_by_username(username)
        if staff is None or not staff.is_active:
            return None
        if not staff.check_password(password or ''):
            logger.warning("Failed login for %s", username)
            return None
        return staff

    @staticmethod
    def create_staff(username: str, display_name: str, role: str, password: str) -> StaffMember:
        username = (username or '').strip()
        if not username or not password:
            raise InvalidArgument("Username and password are required")
        if role not in StaffMember.Role.values:
            raise InvalidArgument(f"Unknown role {role!r}")
        if StaffService.find_by_username(username):
            raise DuplicateKey(f"Username {username} is already taken")

        staff = StaffMember(username=username, display_name=display_name or username, role=role)
        staff.set_password(password)
        try:
            with transaction.atomic():
                staff.save()
        except IntegrityError:
            raise DuplicateKey(f"Username {username} is already taken")
        logger.info("Created staff member %s (%s)", username, role)
        return staff
