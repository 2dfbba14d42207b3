"""
Shared module for cross-cutting concerns of the REST API.

STRUCTURE:
- shared.security: Bearer token verification
  - auth.py: JWT sign/verify, current_user_context

- shared.infrastructure: Database and request plumbing
  - db.py: SQLAlchemy engine and sessions, safe_commit()
  - correlation.py: X-Request-ID middleware and logging filter

- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: Roles, SortOrder, Limits

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Search term sanitizing, LIKE escaping
  - health.py: Dependency health checks

IMPORT EXAMPLES:
    from shared.security.auth import verify_jwt, current_user_context
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import Roles, SortOrder
    from shared.utils.exceptions import NotFoundError, AuthorizationError
    from shared.utils.validators import sanitize_search_term
"""

# No re-exports here; import from the canonical paths above.
