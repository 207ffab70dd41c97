# Supabase table: tool_business_clarity

"""
Expected Supabase table structure:

tool_business_clarity:
- id: uuid (primary key)
- tool_id: uuid (unique, references tools.id) - at most one row per tool
- why_building: text (nullable)
- problem_statement: text (nullable)
- company_usage: text (nullable)
- revenue_model: text (nullable)
- primary_user: text (nullable)
- user_persona: text (nullable)
- end_to_end_workflow: text (nullable)
- challenges_risks: text (nullable)
- success_metrics: text (nullable)
- updated_by: uuid (references users.id)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Readable by anyone who can see the tool; writable by its owner and Admins.
"""
