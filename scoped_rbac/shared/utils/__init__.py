from scoped_rbac.shared.utils.datetime import ensure_utc, utc_now
from scoped_rbac.shared.utils.generators import generate_cuid

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
]
