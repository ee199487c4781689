"""
API Constants and Configuration
"""

# API Version
API_VERSION = "v1"

# Job settings
DEFAULT_JOBS_LIMIT = 20
MAX_JOBS_KEPT = 100

# Job statuses
STATUS_PENDING = "Pending"
STATUS_RUNNING = "Running"
STATUS_COMPLETED = "Completed"
STATUS_FAILED = "Failed"
STATUS_CANCELLED = "Cancelled"
FINISHED_STATUSES = {STATUS_COMPLETED, STATUS_FAILED, STATUS_CANCELLED}
