# Supabase table: openai_usage

"""
Expected Supabase table structure:

openai_usage:
- id: uuid (primary key)
- feature: text (nullable) - which AI feature made the call
- model: text (nullable)
- input_tokens: integer (default: 0)
- output_tokens: integer (default: 0)
- total_tokens: integer (default: 0)
- estimated_cost: numeric (default: 0) - USD
- user_id: uuid (nullable, references users.id)
- created_at: timestamp (default: now())

Rows are written by the AI edge functions; this API only reads them.
"""
