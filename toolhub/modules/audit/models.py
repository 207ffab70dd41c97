# Supabase table: audit_logs

"""
Expected Supabase table structure:

audit_logs:
- id: uuid (primary key)
- user_id: uuid (references users.id) - who performed the action
- action: text - create | update | delete | approve | reject
- entity_type: text - tool | user | request | daily_log | business_clarity
- entity_id: text
- details: jsonb (default: {})
- created_at: timestamp (default: now())
"""
