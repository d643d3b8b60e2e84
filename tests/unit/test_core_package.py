"""Names exported from app.core."""

import app.core
from app.core.config import Settings


def test_exports_resolve():
    for name in app.core.__all__:
        assert hasattr(app.core, name)


def test_get_settings_is_cached():
    assert isinstance(app.core.get_settings(), Settings)
    assert app.core.get_settings() is app.core.get_settings()
