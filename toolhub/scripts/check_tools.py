"""
List every tool in the database, newest first.

    python -m toolhub.scripts.check_tools
"""

import sys
import logging
from typing import Any, Dict, List
from supabase import Client
from toolhub.scripts.script_env import load_settings, anon_client

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def fetch_tools(supabase: Client) -> List[Dict[str, Any]]:
    result = supabase.table("tools")\
        .select("*")\
        .order("created_at", desc=True)\
        .execute()
    return result.data or []


def format_tool(index: int, tool: Dict[str, Any]) -> str:
    return "\n".join([
        f"{index}. {tool.get('name')}",
        f"   Status: {tool.get('approval_status')}",
        f"   Owner ID: {tool.get('owner_id')}",
        f"   Created By: {tool.get('created_by')}",
        f"   Created At: {tool.get('created_at')}",
    ])


def main():
    script_settings = load_settings("supabase_url", "supabase_key")
    try:
        tools = fetch_tools(anon_client(script_settings))
    except Exception as e:
        logger.error(f"Error fetching tools: {e}")
        sys.exit(1)

    logger.info(f"Total tools: {len(tools)}")
    for index, tool in enumerate(tools, start=1):
        print(format_tool(index, tool))


if __name__ == "__main__":
    main()
