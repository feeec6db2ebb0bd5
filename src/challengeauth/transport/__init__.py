"""HTTP pipeline integration for authenticators."""

from .requests_auth import ChallengeAuth

__all__ = ["ChallengeAuth"]
