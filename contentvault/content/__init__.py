"""
Content catalog and interaction log.

Responsibilities:
- Hold content records (Walrus blob references, pricing, visibility, stats).
- Enforce the purchase, tip, update and soft-delete rules.
- Record user interactions that feed the recommendation engine.
"""
