"""
Content recommendation engine.

Responsibilities:
- Encode content records and interaction histories as fixed-width vectors.
- Score content against a user's vector (cosine, or a trained classifier).
- Apply recency, popularity and already-purchased adjustments.
- Explain each recommendation and rank trending content by decayed popularity.
"""
