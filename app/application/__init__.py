"""Application layer: interfaces, DTOs, services and use cases.

Depends only on domain and protocol definitions (DIP).
Infrastructure implements the interfaces (Firestore repos, cache, Stripe, email).
"""
