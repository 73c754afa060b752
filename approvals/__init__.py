"""Approval dashboard orchestration for budgets and purchase orders."""
