# Supabase table: notifications
# This file documents the expected database schema

"""
Expected Supabase table structure:

notifications:
- id: uuid (primary key)
- user_id: uuid (not null, references users.id)
- type: text (not null) - see NotificationType
- title: text (not null)
- message: text (not null)
- related_id: uuid (nullable) - id of the tool/request the notification is about
- related_type: text (nullable) - "tool" or "request"
- is_read: boolean (default: false)
- created_at: timestamp (default: now())

Rows are created by services and server-side functions. Every read and
mutation issued here is scoped with user_id = <caller>; RLS must enforce the
same predicate server-side.
"""
