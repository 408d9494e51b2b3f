"""
Run id helpers
"""
import random


def generate_run_id() -> str:
    """
    Generate a numeric id that tags every log line of one pipeline run.

    Format: 8-digit number (e.g., '48273945')
    """
    return str(random.randint(10000000, 99999999))
