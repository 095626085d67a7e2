from feed.services.auth.gate import resolve_identity

__all__ = ["resolve_identity"]
