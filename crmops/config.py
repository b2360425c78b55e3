# crmops/config.py

import os
from typing import Tuple

from dotenv import load_dotenv

# Load environment variables from the .env file into the system environment
load_dotenv()


def get_supabase_credentials() -> Tuple[str, str]:
    """
    Return (url, key) for the configured Supabase project.

    Values are read at call time so tests (and a late .env) can set them
    after import.

    Raises
    ------
    RuntimeError
        If either variable is missing.
    """
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_KEY")

    missing = [name for name, value in (("SUPABASE_URL", url), ("SUPABASE_KEY", key)) if not value]
    if missing:
        raise RuntimeError(
            f"Supabase credentials not found: {', '.join(missing)}. "
            "Set them in your environment or .env file."
        )

    return url, key  # type: ignore[return-value]
