# Supabase table: tools

"""
Expected Supabase table structure:

tools:
- id: uuid (primary key)
- name: text (not null)
- description: text (nullable)
- url: text (nullable)
- owner_id: uuid (references users.id) - the Owner responsible for the tool
- created_by: uuid (references users.id)
- approval_status: text (default: 'pending') - pending | approved | rejected
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Only Admins move approval_status away from pending. This service checks the
role; the matching RLS policy must exist on the table as well.
"""
