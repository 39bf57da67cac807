"""Filesystem configuration controller and its edit session."""

from partctl.controller.filesystem import ROLE_SETTINGS, FilesystemController, RoleSettings
from partctl.controller.session import ControllerSession, PreservedAttributes

__all__ = [
    "ROLE_SETTINGS",
    "ControllerSession",
    "FilesystemController",
    "PreservedAttributes",
    "RoleSettings",
]
