from prometheus_client import Counter

REQUESTS_CREATED = Counter(
    "permission_requests_created_total",
    "Permission requests staged by document owners",
    ["type"],
)

RESOLUTIONS = Counter(
    "permission_request_resolutions_total",
    "Outcomes of approve/reject calls",
    ["type", "outcome"],
)
