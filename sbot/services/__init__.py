"""Automation services (lint, copyright, issues, labels, hooks)."""
