"""Document id generation (CUID2)."""

from cuid2 import cuid_wrapper

_cuid = cuid_wrapper()


def generate_cuid() -> str:
    """New collision-resistant id for Firestore documents and embedded tasks."""
    return _cuid()
