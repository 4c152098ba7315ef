"""Catering admin API: admin accounts, JWT sessions and role guards."""
