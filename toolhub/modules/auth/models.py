# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User login and session management
# - JWT token generation and validation
# - Password hashing and security
# - TOTP factors for multi-factor authentication

"""
Supabase Auth provides:
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user (and enrolled factors) from JWT token
- auth.sign_out() - Logout users
- auth.admin.update_user_by_id() - Change passwords (service role only)

The ToolHub profile (name, role, must_change_password) lives in public.users,
keyed by the auth user id.
"""
