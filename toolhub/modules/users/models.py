# Supabase tables: users, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, references auth.users.id)
- email: text (unique, not null, stored lowercase)
- name: text (not null)
- role: text (not null) - one of Admin, Owner, Observer
- must_change_password: boolean (default: false)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Note: Password hashes and MFA factors live in auth.users / auth.mfa_factors,
managed by Supabase Auth. Row-level security on this table is the real
enforcement boundary; role checks in this service only gate the API.
"""
