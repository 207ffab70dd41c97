# Supabase table: daily_logs

"""
Expected Supabase table structure:

daily_logs:
- id: uuid (primary key)
- user_id: uuid (not null, references users.id) - the author
- date: date (not null) - the working day the log describes
- work_type: text (default: 'own_tool') - own_tool | others_tool
- tool_id: uuid (not null, references tools.id)
- tool_owner_id: uuid (nullable, references users.id) - set for others_tool
- tasks_completed: text (not null)
- blockers: text (nullable)
- collaboration_notes: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Authors read their own logs; Admins read every log through the team view.
"""
