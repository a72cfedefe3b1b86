"""Application-wide constants."""

# Pagination constants
DEFAULT_PAGE_SIZE = 20
"""Default page size for list endpoints."""

MAX_PAGE_SIZE = 1000
"""Maximum allowed page size."""

CRITICAL_HEALTH_THRESHOLD = 70
"""Projects scoring below this are listed as critical."""

CRITICAL_PROJECTS_LIMIT = 10
"""Maximum number of critical projects on the dashboard."""

RECENT_ITEMS_LIMIT = 5
"""Number of recent projects/sites on the dashboards."""

NEUTRAL_HEALTH_SCORE = 100
"""Average health score reported for an empty project collection."""

DEFAULT_CURRENCY = "INR"

SITE_CLUSTERS = ("KGP", "MCA", "BLS", "GII", "HALDIA", "DGHA", "KGP 2")
"""Clusters used to group railway sites for reporting."""
