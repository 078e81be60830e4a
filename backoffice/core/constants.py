# backoffice/core/constants.py

# Schedule E expense categories (global, not tenant scoped)
# (id, name, schedule_e_line, sort_order)
EXPENSE_CATEGORIES = [
    ("11111111-1111-1111-1111-111111111101", "Advertising", "Line 5", 1),
    ("11111111-1111-1111-1111-111111111102", "Auto and Travel", "Line 6", 2),
    ("11111111-1111-1111-1111-111111111103", "Cleaning and Maintenance", "Line 7", 3),
    ("11111111-1111-1111-1111-111111111104", "Commissions", "Line 8", 4),
    ("11111111-1111-1111-1111-111111111105", "Insurance", "Line 9", 5),
    ("11111111-1111-1111-1111-111111111106", "Legal and Professional Fees", "Line 10", 6),
    ("11111111-1111-1111-1111-111111111107", "Management Fees", "Line 11", 7),
    ("11111111-1111-1111-1111-111111111108", "Mortgage Interest", "Line 12", 8),
    ("11111111-1111-1111-1111-111111111109", "Other Interest", "Line 13", 9),
    ("11111111-1111-1111-1111-111111111110", "Repairs", "Line 14", 10),
    ("11111111-1111-1111-1111-111111111111", "Supplies", "Line 15", 11),
    ("11111111-1111-1111-1111-111111111112", "Taxes", "Line 16", 12),
    ("11111111-1111-1111-1111-111111111113", "Utilities", "Line 17", 13),
    ("11111111-1111-1111-1111-111111111114", "Depreciation", "Line 18", 14),
    ("11111111-1111-1111-1111-111111111115", "Other", "Line 19", 15),
]

MAX_UPLOAD_SIZE_BYTES = 10 * 1024 * 1024  # 10 MB

PHOTO_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/bmp": ".bmp",
    "image/tiff": ".tiff",
}

RECEIPT_CONTENT_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "application/pdf": ".pdf",
}

THUMBNAIL_CONTENT_TYPE = "image/jpeg"
THUMBNAIL_SUFFIX = "_thumb.jpg"
