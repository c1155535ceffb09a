"""
Role based permission classes for API views.
"""

from rest_framework.permissions import BasePermission


class RolePermission(BasePermission):
    role = None
    message = 'You do not have permission to perform this action'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.role == self.role)


class IsTeacher(RolePermission):
    role = 'teacher'
    message = 'Only teachers can perform this action'


class IsStudent(RolePermission):
    role = 'student'
    message = 'Only students can perform this action'
