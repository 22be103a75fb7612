"""
SLA Module
==========

Bounded context for complaint SLA tracking and escalation.

Responsibilities:
- Map priority tiers to resolution budgets (policy table)
- Derive a priority tier from a complaint's category (classifier)
- Evaluate a complaint's SLA state for display (evaluator)
- Periodically escalate overdue complaints and notify a stakeholder (sweep)
- Hot-reload the SLA policy from YAML
"""
