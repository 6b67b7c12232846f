"""
Request-to-caterer matching.

Responsibilities:
- Classify an event's total budget into a subscription tier.
- Score every active caterer against a request with independent weighted rules.
- Filter, rank and cap the candidates into persisted match records.
- Drive the request status through pending → matching → matched.
"""
