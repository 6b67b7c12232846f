"""
Location resolution for South African event locations.

Responsibilities:
- Hold the hand-curated alias table of common place-name variants.
- Cache previously resolved aliases in a learned store with use counts.
- Resolve freeform location text through learned, alias and AI tiers.
"""
