from __future__ import annotations

PRODUCE_QUOTA_PROP = "client.quota.callback.static.produce"
FETCH_QUOTA_PROP = "client.quota.callback.static.fetch"
REQUEST_QUOTA_PROP = "client.quota.callback.static.request"
STORAGE_SOFT_PROP = "client.quota.callback.static.storage.soft"
STORAGE_HARD_PROP = "client.quota.callback.static.storage.hard"
STORAGE_CHECK_INTERVAL_PROP = "client.quota.callback.static.storage.check-interval"
STORAGE_BACKEND_PROP = "client.quota.callback.static.storage.backend"
LOG_DIRS_PROP = "log.dirs"

# Broker property name -> QuotaSettings field
PROPERTY_FIELDS: dict[str, str] = {
    PRODUCE_QUOTA_PROP: "produce_quota",
    FETCH_QUOTA_PROP: "fetch_quota",
    REQUEST_QUOTA_PROP: "request_quota",
    STORAGE_SOFT_PROP: "storage_soft",
    STORAGE_HARD_PROP: "storage_hard",
    STORAGE_CHECK_INTERVAL_PROP: "storage_check_interval",
    STORAGE_BACKEND_PROP: "usage_backend",
    LOG_DIRS_PROP: "log_dirs",
}
