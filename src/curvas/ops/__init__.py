"""Structured operational events for allocation and settlement milestones."""
