"""Project-wide constants (API paths, size units, labels)."""

API_PREFIX = "/api/v1"

SEARCH_ENDPOINT = f"{API_PREFIX}/search"
ADMIN_FILES_ENDPOINT = f"{API_PREFIX}/admin/files"
UPLOAD_ENDPOINT = f"{API_PREFIX}/upload"
FILE_ENDPOINT = f"{API_PREFIX}/files/{{file_id}}"
SHARE_TOGGLE_ENDPOINT = f"{API_PREFIX}/user/files/{{file_id}}/share"
SHARED_PUBLICLY_ENDPOINT = f"{API_PREFIX}/user/shared-publicly"
STORAGE_STATS_ENDPOINT = f"{API_PREFIX}/stats"
USER_STATS_ENDPOINT = f"{API_PREFIX}/users/{{user_id}}/stats"
ADMIN_STATS_ENDPOINT = f"{API_PREFIX}/admin/stats"
QUOTA_ENDPOINT = f"{API_PREFIX}/user/quota"
LOGIN_ENDPOINT = f"{API_PREFIX}/login"
REGISTER_ENDPOINT = f"{API_PREFIX}/register"
VERIFY_OTP_ENDPOINT = f"{API_PREFIX}/verify-otp"
RESEND_OTP_ENDPOINT = f"{API_PREFIX}/resend-otp"
PASSWORD_ENDPOINT = f"{API_PREFIX}/user/password"

PUBLIC_SHARE_ENDPOINT = "/share/{token}"
PUBLIC_SHARE_DOWNLOAD_ENDPOINT = "/share/{token}/download"

USER_ID_HEADER = "X-User-ID"
REQUEST_ID_HEADER = "X-Request-ID"

# Byte multipliers for user-facing size units, smallest first.
SIZE_UNITS = {
    "Bytes": 1,
    "KB": 1024,
    "MB": 1024 ** 2,
    "GB": 1024 ** 3,
}
DEFAULT_SIZE_UNIT = "KB"

MIME_TYPE_ALL = "All"
MIME_TYPES = (
    MIME_TYPE_ALL,
    "image/jpeg",
    "image/png",
    "application/pdf",
    "text/plain",
    "application/zip",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
)

UNKNOWN_OWNER_LABEL = "Unknown User"
RECENT_FILES_LIMIT = 5
MIN_PASSWORD_LENGTH = 6

DEFAULT_TIMEOUT_SECONDS = 30.0
UPLOAD_TIMEOUT_BASE_SECONDS = 30.0
UPLOAD_TIMEOUT_PER_MB_SECONDS = 0.1
