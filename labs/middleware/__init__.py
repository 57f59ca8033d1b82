# labs/middleware/__init__.py
"""
Middleware for the labs app.

This file is part of LabWatch.
Copyright (C) 2025 LabWatch Contributors

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""

from .role_access import RoleAccessMiddleware

__all__ = ["RoleAccessMiddleware"]
