"""
Prometheus metrics
"""

from prometheus_client import Counter, Histogram, Gauge

# HTTP metrics
REQUEST_COUNT = Counter('http_requests_total', 'Total HTTP requests', ['method', 'endpoint', 'status'])
REQUEST_DURATION = Histogram('http_request_duration_seconds', 'HTTP request duration', ['method', 'endpoint'])
ACTIVE_CONNECTIONS = Gauge('http_active_connections', 'Number of active HTTP connections')

# Admission metrics
APPLICATIONS_SUBMITTED = Counter('applications_submitted_total', 'Total applications submitted')
APPLICATIONS_DECIDED = Counter('applications_decided_total', 'Total application decisions', ['decision'])
MEMBERS_REGISTERED = Counter('members_registered_total', 'Total members registered from invitations')
REDEMPTIONS_FAILED = Counter('invitation_redemptions_failed_total', 'Total rejected invitation redemptions')

# Referral metrics
REFERRALS_CREATED = Counter('referrals_created_total', 'Total referrals created')
REFERRAL_TRANSITIONS = Counter('referral_transitions_total', 'Total referral status transitions', ['status'])

# Notification metrics
NOTIFICATIONS_EMITTED = Counter('notifications_emitted_total', 'Outbound notifications', ['kind', 'outcome'])
