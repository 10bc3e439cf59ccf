"""
Kinde Provisioner - declarative seeding of a Kinde environment.

This package provisions one Kinde environment from a single JSON document:
- Application with redirect and logout URLs
- Environment variables
- APIs and their scopes
- Feature flags
- Roles, permissions and role-permission links
"""

__version__ = "0.1.0"
