# Supabase table: requests

"""
Expected Supabase table structure:

requests:
- id: uuid (primary key)
- tool_id: uuid (not null, references tools.id)
- title: text (not null)
- description: text (nullable)
- status: text (default: 'pending') - pending | in_progress | completed
- created_by: uuid (references users.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
