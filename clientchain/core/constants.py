"""Core constants: counter key structure and shared literal values."""

# Daily rate-limit counter keys: rate_limit:{subject_id}:{channel}:{YYYY-MM-DD}
RATE_LIMIT_KEY_PREFIX = "rate_limit"
CACHE_KEY_SEP = ":"

# Event payload keys that may carry the target subject, in lookup order.
SUBJECT_ID_PAYLOAD_KEYS = ("subject_id", "user_id", "userId")

# Execution context keys that may carry the referrer, in lookup order.
REFERRER_ID_CONTEXT_KEYS = ("referrer_id", "referrerId")

# Credits awarded per story-share milestone.
STORY_REWARD_AMOUNTS: dict[str, int] = {
    "posted": 25,
    "click": 10,
    "book": 75,
    "complete": 25,
}

# Profile columns update_subject may write directly; other keys go to attributes.
SUBJECT_PROFILE_FIELDS = frozenset({
    "display_name",
    "email",
    "phone",
    "timezone",
    "opt_out_sms",
    "opt_out_email",
    "consent_marketing",
})

# Never writable through update_subject (credits move only via the ledger).
SUBJECT_PROTECTED_FIELDS = frozenset({"id", "credits"})
