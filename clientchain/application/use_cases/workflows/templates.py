"""Built-in workflow templates for common referral-marketing journeys."""

from typing import Any

WORKFLOW_TEMPLATES: dict[str, dict[str, Any]] = {
    "treatment_completed_referral_prompt": {
        "description": "Ask for a referral at the front desk once a treatment is done.",
        "triggers": [{"kind": "event", "event_type": "booking_completed"}],
        "actions": [
            {"kind": "wait", "seconds": 300},
            {"kind": "record_prompt", "prompt_kind": "friend_tagging"},
        ],
    },
    "friend_tagged_instant_dm": {
        "description": "Text a tagged friend right away.",
        "triggers": [{"kind": "event", "event_type": "friend_tagged"}],
        "actions": [
            {"kind": "send_sms", "message": "Watch your personalized video and share."},
        ],
    },
    "friend_books_notify_referrer": {
        "description": "Reward and thank the referrer when their friend books.",
        "triggers": [{"kind": "event", "event_type": "booking_created_with_referral"}],
        "actions": [
            {
                "kind": "notify_referrer",
                "message": "Great news! You earned $75!",
                "credit_amount": 75,
            }
        ],
    },
    "no_referral_30_days": {
        "description": "Nudge clients who have not referred anyone for a month.",
        "triggers": [{"kind": "elapsed", "event_type": "no_referral_since", "days": 30}],
        "actions": [
            {
                "kind": "send_email",
                "subject": "Share your results",
                "body": "Post a story and get $50 credit.",
            }
        ],
    },
    "high_lead_score_followup": {
        "description": "Hand hot leads to staff and open the conversation.",
        "triggers": [{"kind": "threshold", "event_type": "lead_score_above", "threshold": 80}],
        "actions": [
            {"kind": "create_task", "title": "Call hot lead"},
            {"kind": "send_sms", "message": "Hi, can I answer questions?"},
        ],
    },
    "abandoned_booking_recovery": {
        "description": "Win back a booking abandoned in the last two hours.",
        "triggers": [
            {
                "kind": "within",
                "event_type": "booking_abandoned",
                "hours": 2,
                "field": "abandoned_at",
            }
        ],
        "actions": [
            {"kind": "wait", "seconds": 3600},
            {
                "kind": "send_email",
                "subject": "Complete your booking",
                "body": "Finish and get $25 off.",
            },
            {"kind": "wait", "seconds": 86400},
            {"kind": "send_sms", "message": "Last chance! Slot is being released."},
        ],
    },
}
